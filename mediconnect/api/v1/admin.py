from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.security import JWTConfig, UserRole
from ...api.deps import get_admin_user, get_jwt_config
from ...models.user import User
from ...schemas.auth import AdminChangePassword, PasswordConfirmation
from ...schemas.common import APIResponse, MessageResponse
from ...schemas.profile import AdminProfileUpdate, UserWithProfile
from ...schemas.user import UserResponse
from ...services.admin_service import AdminService
from ...services.auth_service import AuthService
from ...services.profile_service import ProfileService, to_profile_response

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=APIResponse[List[UserResponse]])
async def list_users(
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    """All doctors and patients, newest first."""
    users = AdminService(db).list_users()
    return {"success": True, "count": len(users), "data": users}


@router.get("/doctors", response_model=APIResponse[List[UserResponse]])
async def list_doctors(
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    doctors = AdminService(db).list_users(UserRole.DOCTOR)
    return {"success": True, "count": len(doctors), "data": doctors}


@router.get("/patients", response_model=APIResponse[List[UserResponse]])
async def list_patients(
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    patients = AdminService(db).list_users(UserRole.PATIENT)
    return {"success": True, "count": len(patients), "data": patients}


@router.get("/users/{user_id}", response_model=APIResponse[UserWithProfile])
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    user, profile = AdminService(db).get_user(user_id)
    return {
        "success": True,
        "data": {"user": user, "profile": to_profile_response(profile) if profile else None},
    }


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    confirmation: Optional[PasswordConfirmation] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_admin_user)
):
    """Delete a doctor or patient; the admin re-enters their own password."""
    password = confirmation.password if confirmation else None
    AdminService(db).delete_user(current_user, user_id, password)
    return {"success": True, "message": "User and associated data deleted successfully"}


@router.put("/profile", response_model=APIResponse[UserWithProfile])
async def update_admin_profile(
    profile_data: AdminProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_admin_user)
):
    profile = ProfileService(db).update_admin_profile(current_user, profile_data)
    return {
        "success": True,
        "data": {"user": current_user, "profile": to_profile_response(profile)},
    }


@router.put("/change-password", response_model=MessageResponse)
async def change_admin_password(
    password_data: AdminChangePassword,
    db: Session = Depends(get_db),
    jwt_config: JWTConfig = Depends(get_jwt_config),
    current_user: User = Depends(get_admin_user)
):
    AuthService(db, jwt_config).change_password(
        current_user, password_data.current_password, password_data.new_password
    )
    return {"success": True, "message": "Password updated successfully"}
