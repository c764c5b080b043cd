from sqlalchemy import delete, or_, update
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
import logging

from ..core.exceptions import NotFoundError, ValidationError
from ..core.security import AuthenticationError, UserRole, verify_password
from ..models.appointment import Appointment
from ..models.health_record import HealthRecord
from ..models.profile import Profile
from ..models.user import User, doctor_patients
from .profile_service import find_profile

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, db: Session):
        self.db = db

    def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        """Non-admin users, or only those of ``role``, newest first."""
        query = self.db.query(User)
        if role is None:
            query = query.filter(User.role != UserRole.ADMIN)
        else:
            query = query.filter(User.role == role)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def get_user(self, user_id: int) -> Tuple[User, Optional[Profile]]:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user, find_profile(self.db, user.id)

    def delete_user(self, admin: User, user_id: int, password: Optional[str]) -> None:
        """Delete a doctor or patient after re-checking the admin's password."""
        if not password:
            raise ValidationError("Password is required for this operation", code="PASSWORD_REQUIRED")
        if not verify_password(password, admin.password_hash):
            logger.warning(f"Admin {admin.id} failed password check deleting user {user_id}")
            raise AuthenticationError("Invalid admin password", code="INVALID_PASSWORD")

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        if user.role == UserRole.ADMIN:
            raise ValidationError("Cannot delete admin users", code="ADMIN_UNDELETABLE")

        # Keep every doctor's patients_count equal to the size of their served set
        served_by = [
            row.doctor_id for row in self.db.execute(
                doctor_patients.select().where(doctor_patients.c.patient_id == user.id)
            )
        ]
        if served_by:
            self.db.execute(
                update(User)
                .where(User.id.in_(served_by))
                .values(patients_count=User.patients_count - 1)
            )
        self.db.execute(
            delete(doctor_patients).where(
                or_(doctor_patients.c.patient_id == user.id, doctor_patients.c.doctor_id == user.id)
            )
        )
        self.db.execute(
            delete(Appointment).where(
                or_(Appointment.patient_id == user.id, Appointment.doctor_id == user.id)
            )
        )
        self.db.execute(
            delete(HealthRecord).where(
                or_(HealthRecord.patient_id == user.id, HealthRecord.user_id == user.id)
            )
        )
        self.db.execute(
            update(HealthRecord).where(HealthRecord.doctor_id == user.id).values(doctor_id=None)
        )

        role = UserRole(user.role).value

        # Profile goes with the user through the relationship cascade
        self.db.delete(user)
        self.db.commit()

        logger.info(f"Admin {admin.id} deleted {role} user {user_id}")
