import datetime as dt
from pydantic import Field
from typing import Annotated, List, Literal, Optional, Union

from .common import CamelModel
from .user import EmergencyContact, Gender, UserResponse
from ..core.security import UserRole


class Qualification(CamelModel):
    degree: str = Field(..., min_length=1)
    institution: str = Field(..., min_length=1)
    year: Optional[str] = None


class ProfileUser(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole
    phone: str = ""


class _ProfileBase(CamelModel):
    id: int
    user: ProfileUser
    date_of_birth: Optional[dt.date] = None
    gender: Optional[str] = None


class PatientProfileResponse(_ProfileBase):
    role: Literal[UserRole.PATIENT]
    height: Optional[float] = None
    weight: Optional[float] = None
    conditions: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    emergency_contact: Optional[EmergencyContact] = None


class DoctorProfileResponse(_ProfileBase):
    role: Literal[UserRole.DOCTOR]
    specialization: Optional[str] = None
    qualifications: List[Qualification] = Field(default_factory=list)
    experience: Optional[str] = None
    about: Optional[str] = None


class AdminProfileResponse(_ProfileBase):
    role: Literal[UserRole.ADMIN]


ProfileResponse = Annotated[
    Union[PatientProfileResponse, DoctorProfileResponse, AdminProfileResponse],
    Field(discriminator="role"),
]


class ProfileUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[dt.date] = None
    gender: Optional[Gender] = None

    # Doctor
    specialization: Optional[str] = None
    experience: Optional[str] = None
    about: Optional[str] = None
    qualifications: Optional[List[Qualification]] = None

    # Patient
    height: Optional[float] = None
    weight: Optional[float] = None
    conditions: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    emergency_contact: Optional[EmergencyContact] = None


class AdminProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    date_of_birth: Optional[dt.date] = None
    gender: Optional[Gender] = None


class UserWithProfile(CamelModel):
    user: UserResponse
    profile: Optional[ProfileResponse] = None
