import datetime as dt
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user
from ...models.user import User
from ...schemas.appointment import (
    AppointmentCreate, AppointmentResponse, AppointmentStatusUpdate, MarkVisited
)
from ...schemas.common import APIResponse
from ...services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post(
    "",
    response_model=APIResponse[AppointmentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Request an appointment (patients only)."""
    appointment = AppointmentService(db).create_appointment(current_user, appointment_data)
    return {"success": True, "data": appointment}


@router.get("", response_model=APIResponse[List[AppointmentResponse]])
async def list_appointments(
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[dt.date] = Query(None, alias="startDate"),
    end_date: Optional[dt.date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the caller's appointments.

    Doctors see confirmed and completed appointments unless ``status`` asks for
    ``pending``, another single status, or ``all``.
    """
    appointments = AppointmentService(db).list_appointments(
        current_user, status_filter, start_date, end_date
    )
    return {"success": True, "count": len(appointments), "data": appointments}


@router.get("/{appointment_id}", response_model=APIResponse[AppointmentResponse])
async def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appointment = AppointmentService(db).get_appointment(appointment_id, current_user)
    return {"success": True, "data": appointment}


@router.put("/{appointment_id}", response_model=APIResponse[AppointmentResponse])
async def update_appointment_status(
    appointment_id: int,
    update_data: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Change the status of one of the doctor's appointments."""
    appointment = AppointmentService(db).update_status(
        appointment_id, current_user, update_data.status, update_data.notes
    )
    return {"success": True, "data": appointment}


@router.put("/{appointment_id}/visited", response_model=APIResponse[AppointmentResponse])
async def mark_appointment_visited(
    appointment_id: int,
    visit_data: Optional[MarkVisited] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Mark that the patient attended; completes the appointment."""
    notes = visit_data.notes if visit_data else None
    appointment = AppointmentService(db).mark_visited(appointment_id, current_user, notes)
    return {"success": True, "data": appointment}


@router.delete("/{appointment_id}", response_model=APIResponse[AppointmentResponse])
async def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cancel an appointment (owning patient or doctor)."""
    appointment = AppointmentService(db).cancel_appointment(appointment_id, current_user)
    return {"success": True, "data": appointment, "message": "Appointment cancelled"}
