from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import APIError
from ..core.permissions import is_role
from ..core.security import (
    security, decode_access_token, AuthenticationError,
    AuthorizationError, JWTConfig, UserRole, TokenPayload
)
from ..models.user import User

logger = logging.getLogger(__name__)


def get_jwt_config(request: Request) -> JWTConfig:
    """JWT parameters injected into the application at startup."""
    return request.app.state.jwt_config


async def get_current_user_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    jwt_config: JWTConfig = Depends(get_jwt_config),
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authorization denied. No token provided", code="NO_TOKEN")

    return decode_access_token(jwt_config, credentials.credentials)


async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    user = db.query(User).filter(User.id == token_payload.user_id).first()
    if not user:
        raise AuthenticationError("User not found", code="USER_NOT_FOUND")

    return user


# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    async def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if not is_role(current_user, *allowed_roles):
            raise AuthorizationError(
                f"Access denied. Requires {' or '.join(role.value for role in allowed_roles)} role",
                code="ROLE_REQUIRED"
            )
        return current_user

    return role_checker


# Specific role dependencies
async def get_admin_user(
    current_user: User = Depends(require_role([UserRole.ADMIN]))
) -> User:
    """Require admin role."""
    return current_user


async def get_doctor_user(
    current_user: User = Depends(require_role([UserRole.DOCTOR]))
) -> User:
    """Require doctor role."""
    return current_user


async def get_patient_user(
    current_user: User = Depends(require_role([UserRole.PATIENT]))
) -> User:
    """Require patient role."""
    return current_user


# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client=Depends(get_redis)
) -> None:
    """Per-IP request budget for the public authentication endpoints."""
    if not settings.RATE_LIMIT_ENABLED:
        return None

    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    current_requests = redis_client.incr(key)
    if current_requests == 1:
        redis_client.expire(key, settings.RATE_LIMIT_WINDOW_SECONDS)

    if current_requests > settings.RATE_LIMIT_REQUESTS:
        logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
        raise APIError(
            status_code=429,
            detail="Too many requests. Please try again later.",
            code="RATE_LIMITED"
        )
