from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import JWTConfig
from ...api.deps import get_current_user, get_jwt_config, rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.auth import UserLogin, UserRegister, AuthResponse
from ...schemas.common import APIResponse, MessageResponse
from ...schemas.user import UserResponse
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    jwt_config: JWTConfig = Depends(get_jwt_config),
    _: None = Depends(rate_limit_check)
):
    """Register a new patient or doctor."""
    return AuthService(db, jwt_config).register_user(user_data)


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    jwt_config: JWTConfig = Depends(get_jwt_config),
    _: None = Depends(rate_limit_check)
):
    """Authenticate user and return an access token."""
    return AuthService(db, jwt_config).authenticate_user(login_data)


@router.get("/verify", response_model=APIResponse[UserResponse])
async def verify(
    current_user: User = Depends(get_current_user)
):
    """Verify the bearer token and return the user it belongs to."""
    return {"success": True, "data": current_user}


@router.post("/logout", response_model=MessageResponse)
async def logout():
    """Tokens are stateless; the client discards its copy."""
    return {"success": True, "message": "Logout successful"}
