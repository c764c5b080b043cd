import datetime as dt
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.security import UserRole
from ...api.deps import get_current_user
from ...schemas.appointment import Availability
from ...schemas.common import APIResponse
from ...schemas.profile import UserWithProfile
from ...schemas.user import DoctorListItem
from ...services.appointment_service import AppointmentService
from ...services.directory_service import DirectoryService
from ...services.profile_service import to_profile_response

router = APIRouter(
    prefix="/doctors",
    tags=["Doctors"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=APIResponse[List[DoctorListItem]])
async def list_doctors(
    specialization: Optional[str] = None,
    name: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """List doctors, optionally filtered by specialization or name."""
    doctors = DirectoryService(db).list_doctors(specialization, name)
    return {"success": True, "count": len(doctors), "data": doctors}


@router.get("/{doctor_id}", response_model=APIResponse[UserWithProfile])
async def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    doctor, profile = DirectoryService(db).get_with_profile(doctor_id, UserRole.DOCTOR)
    return {
        "success": True,
        "data": {"user": doctor, "profile": to_profile_response(profile) if profile else None},
    }


@router.get("/{doctor_id}/availability", response_model=APIResponse[Availability])
async def get_doctor_availability(
    doctor_id: int,
    on_date: Optional[dt.date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    """Open slots for the doctor on a date (today by default)."""
    on_date = on_date or dt.date.today()
    slots = AppointmentService(db).get_availability(doctor_id, on_date)
    return {"success": True, "data": {"date": on_date, "available_slots": slots}}
