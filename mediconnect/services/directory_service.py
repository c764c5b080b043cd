from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple

from ..core.exceptions import NotFoundError
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus
from ..models.profile import Profile
from ..models.user import User
from .profile_service import find_profile


class DirectoryService:
    """Read-only lookups of doctors and patients."""

    def __init__(self, db: Session):
        self.db = db

    def list_doctors(self, specialization: Optional[str] = None, name: Optional[str] = None) -> List[User]:
        query = self.db.query(User).filter(User.role == UserRole.DOCTOR)
        if specialization:
            query = query.filter(User.specialization.ilike(f"%{specialization}%"))
        if name:
            query = query.filter(User.name.ilike(f"%{name}%"))
        return query.order_by(User.name).all()

    def list_patients(self) -> List[User]:
        return self.db.query(User).filter(User.role == UserRole.PATIENT).order_by(User.name).all()

    def visited_patients(self, doctor: User) -> List[User]:
        """Patients who visited, or hold a confirmed or completed appointment with, the doctor."""
        patient_ids = select(Appointment.patient_id).where(
            Appointment.doctor_id == doctor.id,
            or_(
                Appointment.visited.is_(True),
                Appointment.status.in_((AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED)),
            ),
        ).distinct()

        return self.db.query(User).filter(
            User.id.in_(patient_ids),
            User.role == UserRole.PATIENT
        ).order_by(User.name).all()

    def get_with_profile(self, user_id: int, role: UserRole) -> Tuple[User, Optional[Profile]]:
        user = self.db.query(User).filter(User.id == user_id, User.role == role).first()
        if not user:
            raise NotFoundError(f"{role.value.capitalize()} not found")
        return user, find_profile(self.db, user.id)
