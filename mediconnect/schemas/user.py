import datetime as dt
from pydantic import Field
from typing import List, Literal, Optional

from .common import CamelModel
from ..core.security import UserRole

Gender = Literal["male", "female", "other", "prefer-not-to-say"]


class EmergencyContact(CamelModel):
    name: Optional[str] = ""
    relationship: Optional[str] = ""
    phone: Optional[str] = ""


class UserResponse(CamelModel):
    """User identity as returned to clients; never includes the password hash."""

    id: int
    name: str
    email: str
    phone: str = ""
    role: UserRole
    specialization: Optional[str] = None
    date_of_birth: Optional[dt.date] = None
    gender: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    emergency_contact: Optional[EmergencyContact] = None
    patients_count: int = 0
    patients_served_ids: List[int] = Field(default_factory=list, serialization_alias="patientsServed")
    created_at: Optional[dt.datetime] = None


class DoctorListItem(CamelModel):
    id: int
    name: str
    specialization: Optional[str] = None
    gender: Optional[str] = None
