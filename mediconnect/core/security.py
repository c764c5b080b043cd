from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from fastapi import status
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from enum import Enum

from .config import Settings, settings
from .exceptions import APIError

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# JWT Security; missing headers are reported by get_current_user_token
security = HTTPBearer(auto_error=False)


class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


@dataclass(frozen=True)
class JWTConfig:
    """Signing parameters for access tokens, built once at startup."""

    secret: str
    algorithm: str
    expire_minutes: int
    issuer: str
    audience: str

    @classmethod
    def from_settings(cls, config: Settings) -> "JWTConfig":
        return cls(
            secret=config.SECRET_KEY,
            algorithm=config.ALGORITHM,
            expire_minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES,
            issuer=config.JWT_ISSUER,
            audience=config.JWT_AUDIENCE,
        )


class TokenPayload(BaseModel):
    sub: str
    email: str
    role: UserRole
    exp: Optional[int] = None

    @property
    def user_id(self) -> int:
        return int(self.sub)


# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


# JWT utilities
def create_access_token(
    config: JWTConfig,
    user_id: int,
    email: str,
    role: UserRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed access token carrying the caller identity."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=config.expire_minutes)
    )

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "role": UserRole(role).value,
        "exp": expire,
        "iss": config.issuer,
        "aud": config.audience,
    }

    return jwt.encode(to_encode, config.secret, algorithm=config.algorithm)


def decode_access_token(config: JWTConfig, token: str) -> TokenPayload:
    """Verify and decode JWT token, raising AuthenticationError on failure."""
    try:
        payload = jwt.decode(
            token,
            config.secret,
            algorithms=[config.algorithm],
            audience=config.audience,
            issuer=config.issuer,
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired", code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationError("Token is not valid", code="INVALID_TOKEN")

    try:
        return TokenPayload(**payload)
    except ValueError:
        raise AuthenticationError(
            "Token is not valid - missing user data",
            code="INVALID_TOKEN_FORMAT"
        )


# Security exceptions
class AuthenticationError(APIError):
    def __init__(self, detail: str = "Could not validate credentials", code: str = "INVALID_TOKEN"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            code=code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(APIError):
    def __init__(self, detail: str = "Not enough permissions", code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            code=code,
        )
