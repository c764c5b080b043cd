from sqlalchemy.orm import Session
from fastapi import HTTPException, status
import logging

from ..models.user import User
from ..core.exceptions import ValidationError
from ..core.security import (
    JWTConfig, UserRole, verify_password, get_password_hash,
    create_access_token, AuthenticationError
)
from ..schemas.auth import UserLogin, DoctorRegister, PatientRegister, AuthResponse
from ..schemas.user import UserResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, jwt_config: JWTConfig):
        self.db = db
        self.jwt_config = jwt_config

    def register_user(self, user_data) -> AuthResponse:
        """Register a new patient or doctor and issue a token."""
        # Check if user already exists
        existing_user = self.db.query(User).filter(
            User.email == user_data.email
        ).first()

        if existing_user:
            logger.warning(f"Registration rejected, email already exists: {user_data.email}")
            raise ValidationError("Email already exists", code="EMAIL_EXISTS")

        new_user = User(
            name=user_data.name,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            phone=user_data.phone or "",
            role=UserRole(user_data.role),
            date_of_birth=user_data.date_of_birth,
            gender=user_data.gender,
        )

        # Role-specific fields
        match user_data:
            case DoctorRegister(specialization=specialization):
                new_user.specialization = specialization
            case PatientRegister(height=height, weight=weight, emergency_contact=contact):
                new_user.height = height
                new_user.weight = weight
                if contact and (contact.name or contact.relationship or contact.phone):
                    new_user.emergency_contact = contact.model_dump()

        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)

        logger.info(f"Registered {new_user.role.value} user {new_user.id}")
        return self._token_response(new_user)

    def authenticate_user(self, login_data: UserLogin) -> AuthResponse:
        """Authenticate user and return a token."""
        user = self.db.query(User).filter(
            User.email == login_data.email
        ).first()

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Failed login attempt for {login_data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        logger.info(f"User {user.id} logged in")
        return self._token_response(user)

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """Replace the user's password after verifying the current one."""
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect", code="INVALID_PASSWORD")

        user.password_hash = get_password_hash(new_password)
        self.db.commit()
        logger.info(f"Password changed for user {user.id}")

    def _token_response(self, user: User) -> AuthResponse:
        token = create_access_token(self.jwt_config, user.id, user.email, user.role)
        return AuthResponse(token=token, user=UserResponse.model_validate(user))
