import datetime as dt
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user
from ...models.user import User
from ...schemas.common import APIResponse, MessageResponse
from ...schemas.health import Dashboard, HealthRecordCreate, HealthRecordResponse, HealthRecordUpdate
from ...services.health_service import HealthService

router = APIRouter(prefix="/health", tags=["Health Records"])


@router.get("", response_model=APIResponse[List[HealthRecordResponse]])
@router.get("/records", response_model=APIResponse[List[HealthRecordResponse]])
async def list_health_records(
    start_date: Optional[dt.date] = Query(None, alias="startDate"),
    end_date: Optional[dt.date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Patients get their own records, doctors the records they wrote. Newest first."""
    records = HealthService(db).list_records(current_user, start_date, end_date)
    return {"success": True, "count": len(records), "data": records}


@router.get("/dashboard", response_model=APIResponse[Dashboard])
async def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "data": HealthService(db).dashboard(current_user)}


@router.post(
    "/record",
    response_model=APIResponse[HealthRecordResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_health_record(
    record_data: HealthRecordCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    record = HealthService(db).create_record(current_user, record_data)
    return {"success": True, "data": record}


@router.put("/records/{record_id}", response_model=APIResponse[HealthRecordResponse])
async def update_health_record(
    record_id: int,
    record_data: HealthRecordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    record = HealthService(db).update_record(record_id, current_user, record_data)
    return {"success": True, "data": record}


@router.delete("/records/{record_id}", response_model=MessageResponse)
async def delete_health_record(
    record_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    HealthService(db).delete_record(record_id, current_user)
    return {"success": True, "message": "Health record deleted"}


@router.get("/{record_id}", response_model=APIResponse[HealthRecordResponse])
async def get_health_record(
    record_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    record = HealthService(db).get_record(record_id, current_user)
    return {"success": True, "data": record}
