from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import UserRole
from ...api.deps import get_doctor_user
from ...models.user import User
from ...schemas.common import APIResponse
from ...schemas.health import HealthRecordResponse
from ...schemas.profile import UserWithProfile
from ...schemas.user import UserResponse
from ...services.directory_service import DirectoryService
from ...services.health_service import HealthService
from ...services.profile_service import to_profile_response

# Patient data is visible to doctors only
router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("", response_model=APIResponse[List[UserResponse]])
async def list_patients(
    db: Session = Depends(get_db),
    _: User = Depends(get_doctor_user)
):
    patients = DirectoryService(db).list_patients()
    return {"success": True, "count": len(patients), "data": patients}


@router.get("/visited", response_model=APIResponse[List[UserResponse]])
async def list_visited_patients(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_doctor_user)
):
    """Patients who visited or hold a confirmed or completed appointment with the caller."""
    patients = DirectoryService(db).visited_patients(current_user)
    return {"success": True, "count": len(patients), "data": patients}


@router.get("/{patient_id}", response_model=APIResponse[UserWithProfile])
async def get_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_doctor_user)
):
    patient, profile = DirectoryService(db).get_with_profile(patient_id, UserRole.PATIENT)
    return {
        "success": True,
        "data": {"user": patient, "profile": to_profile_response(profile) if profile else None},
    }


@router.get("/{patient_id}/records", response_model=APIResponse[List[HealthRecordResponse]])
async def get_patient_records(
    patient_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_doctor_user)
):
    records = HealthService(db).records_for_patient(patient_id)
    return {"success": True, "count": len(records), "data": records}
