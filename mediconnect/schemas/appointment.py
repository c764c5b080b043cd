import datetime as dt
from pydantic import Field, field_validator
from typing import List, Optional

from .common import CamelModel, DoctorSummary, UserSummary
from ..models.appointment import AppointmentStatus, TIME_SLOTS


class AppointmentCreate(CamelModel):
    doctor_id: int
    date: dt.date
    time_slot: str
    reason: str = Field(..., min_length=1)
    notes: Optional[str] = ""

    @field_validator("time_slot")
    @classmethod
    def check_time_slot(cls, value: str) -> str:
        value = value.strip()
        if value not in TIME_SLOTS:
            raise ValueError(f"Time slot must be one of: {', '.join(TIME_SLOTS)}")
        return value

    @field_validator("reason")
    @classmethod
    def check_reason(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Reason is required")
        return value


class AppointmentStatusUpdate(CamelModel):
    status: AppointmentStatus
    notes: Optional[str] = None


class MarkVisited(CamelModel):
    notes: Optional[str] = None


class AppointmentResponse(CamelModel):
    id: int
    patient: UserSummary
    doctor: DoctorSummary
    date: dt.date
    time_slot: str
    reason: str
    status: AppointmentStatus
    visited: bool
    notes: Optional[str] = ""
    created_at: Optional[dt.datetime] = None


class Availability(CamelModel):
    date: dt.date
    available_slots: List[str]
