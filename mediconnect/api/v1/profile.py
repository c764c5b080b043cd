from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import JWTConfig
from ...api.deps import get_current_user, get_jwt_config
from ...models.user import User
from ...schemas.auth import ChangePassword
from ...schemas.common import APIResponse, MessageResponse
from ...schemas.profile import ProfileResponse, ProfileUpdate
from ...services.auth_service import AuthService
from ...services.profile_service import ProfileService, to_profile_response

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/me", response_model=APIResponse[ProfileResponse])
async def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Return the caller's profile, creating it from the account on first access."""
    profile = ProfileService(db).get_or_create_profile(current_user)
    return {"success": True, "data": to_profile_response(profile)}


@router.put("/me", response_model=APIResponse[ProfileResponse])
async def update_my_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    profile = ProfileService(db).update_profile(current_user, profile_data)
    return {"success": True, "data": to_profile_response(profile)}


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    password_data: ChangePassword,
    db: Session = Depends(get_db),
    jwt_config: JWTConfig = Depends(get_jwt_config),
    current_user: User = Depends(get_current_user)
):
    AuthService(db, jwt_config).change_password(
        current_user, password_data.current_password, password_data.new_password
    )
    return {"success": True, "message": "Password updated successfully"}
