import datetime as dt
from pydantic import Field
from typing import List, Optional

from .common import CamelModel, DoctorSummary, UserSummary


class BloodPressure(CamelModel):
    systolic: Optional[float] = Field(None, ge=0)
    diastolic: Optional[float] = Field(None, ge=0)


class HealthRecordBase(CamelModel):
    date: Optional[dt.datetime] = None
    blood_pressure: Optional[BloodPressure] = None
    heart_rate: Optional[float] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    glucose_level: Optional[float] = Field(None, ge=0)
    symptoms: Optional[str] = None
    medications: Optional[str] = None
    notes: Optional[str] = None


class HealthRecordCreate(HealthRecordBase):
    # Required when a doctor records on behalf of a patient
    patient_id: Optional[int] = None


class HealthRecordUpdate(HealthRecordBase):
    pass


class HealthRecordResponse(CamelModel):
    id: int
    patient: UserSummary
    doctor: Optional[DoctorSummary] = None
    date: dt.datetime
    blood_pressure: BloodPressure
    heart_rate: Optional[float] = None
    weight: Optional[float] = None
    glucose_level: Optional[float] = None
    symptoms: Optional[str] = None
    medications: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class VitalsSummary(CamelModel):
    blood_pressure: BloodPressure = Field(default_factory=BloodPressure)
    heart_rate: Optional[float] = None
    weight: Optional[float] = None
    glucose_level: Optional[float] = None


class Dashboard(CamelModel):
    recent_entries: List[HealthRecordResponse]
    summary: VitalsSummary
