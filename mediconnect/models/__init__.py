from .user import User, doctor_patients
from .profile import Profile
from .appointment import Appointment, AppointmentStatus
from .health_record import HealthRecord

__all__ = [
    "User",
    "doctor_patients",
    "Profile",
    "Appointment",
    "AppointmentStatus",
    "HealthRecord",
]
