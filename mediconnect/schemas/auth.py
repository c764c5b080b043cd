import datetime as dt
from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Annotated, Literal, Optional, Union

from .common import CamelModel
from .user import EmergencyContact, Gender, UserResponse


class _RegisterBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=30)
    password_confirm: str
    date_of_birth: dt.date
    gender: Gender
    phone: str = ""

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name field is required")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Passwords must match")
        return self


class PatientRegister(_RegisterBase):
    role: Literal["patient"]
    height: float
    weight: float
    emergency_contact: Optional[EmergencyContact] = None


class DoctorRegister(_RegisterBase):
    role: Literal["doctor"]
    specialization: str = Field(..., min_length=1, max_length=255)

    @field_validator("specialization")
    @classmethod
    def require_specialization(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Specialization is required for doctors")
        return value


# Admin accounts are created by scripts, never through the public API
UserRegister = Annotated[Union[PatientRegister, DoctorRegister], Field(discriminator="role")]


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class AuthResponse(CamelModel):
    success: bool = True
    token: str
    user: UserResponse


class ChangePassword(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class AdminChangePassword(ChangePassword):
    new_password: str = Field(..., min_length=8)


class PasswordConfirmation(CamelModel):
    password: Optional[str] = None
