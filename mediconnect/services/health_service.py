from sqlalchemy.orm import Session
from datetime import date, datetime, time
from typing import List, Optional
import logging

from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import is_party, is_role
from ..core.security import AuthorizationError, UserRole
from ..models.health_record import HealthRecord
from ..models.user import User
from ..schemas.health import HealthRecordCreate, HealthRecordUpdate

logger = logging.getLogger(__name__)

VITAL_FIELDS = ("heart_rate", "weight", "glucose_level", "symptoms", "medications", "notes")


class HealthService:
    def __init__(self, db: Session):
        self.db = db

    def list_records(
        self,
        caller: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[HealthRecord]:
        """Patients see their own records, doctors the records they authored."""
        query = self.db.query(HealthRecord)
        if is_role(caller, UserRole.PATIENT):
            query = query.filter(HealthRecord.patient_id == caller.id)
        elif is_role(caller, UserRole.DOCTOR):
            query = query.filter(HealthRecord.doctor_id == caller.id)
        else:
            raise AuthorizationError("Not authorized to list health records")

        if start_date:
            query = query.filter(HealthRecord.date >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(HealthRecord.date <= datetime.combine(end_date, time.max))

        return query.order_by(HealthRecord.date.desc(), HealthRecord.id.desc()).all()

    def records_for_patient(self, patient_id: int) -> List[HealthRecord]:
        patient = self.db.query(User).filter(
            User.id == patient_id,
            User.role == UserRole.PATIENT
        ).first()
        if not patient:
            raise NotFoundError("Patient not found")

        return self.db.query(HealthRecord).filter(
            HealthRecord.patient_id == patient_id
        ).order_by(HealthRecord.date.desc(), HealthRecord.id.desc()).all()

    def get_record(self, record_id: int, caller: User) -> HealthRecord:
        record = self._get_or_404(record_id)
        if not is_party(caller, record.patient_id, record.doctor_id):
            raise AuthorizationError("Not authorized to access this record")
        return record

    def create_record(self, caller: User, data: HealthRecordCreate) -> HealthRecord:
        """Patients record for themselves; doctors record for a named patient."""
        if is_role(caller, UserRole.DOCTOR):
            if not data.patient_id:
                raise ValidationError(
                    "Patient ID is required when doctor creates a record",
                    code="PATIENT_REQUIRED"
                )
            patient = self.db.query(User).filter(
                User.id == data.patient_id,
                User.role == UserRole.PATIENT
            ).first()
            if not patient:
                raise NotFoundError("Patient not found")
            patient_id, doctor_id = patient.id, caller.id
        elif is_role(caller, UserRole.PATIENT):
            patient_id, doctor_id = caller.id, None
        else:
            raise AuthorizationError("Not authorized to create health records")

        record = HealthRecord(user_id=patient_id, patient_id=patient_id, doctor_id=doctor_id)
        if data.date:
            record.date = data.date
        self._apply(record, data.model_dump(exclude_unset=True))

        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)

        logger.info(f"Health record {record.id} created for patient {patient_id} by user {caller.id}")
        return record

    def update_record(self, record_id: int, caller: User, data: HealthRecordUpdate) -> HealthRecord:
        record = self._get_or_404(record_id)
        self._check_can_modify(record, caller, "update")

        changes = data.model_dump(exclude_unset=True)
        if "date" in changes and changes["date"] is not None:
            record.date = changes["date"]
        self._apply(record, changes)

        self.db.commit()
        self.db.refresh(record)

        logger.info(f"Health record {record.id} updated by user {caller.id}")
        return record

    def delete_record(self, record_id: int, caller: User) -> None:
        record = self._get_or_404(record_id)
        self._check_can_modify(record, caller, "delete")

        self.db.delete(record)
        self.db.commit()
        logger.info(f"Health record {record_id} deleted by user {caller.id}")

    def dashboard(self, caller: User) -> dict:
        """Five most recent entries and the vitals of the latest one."""
        recent = self.db.query(HealthRecord).filter(
            HealthRecord.user_id == caller.id
        ).order_by(HealthRecord.date.desc(), HealthRecord.id.desc()).limit(5).all()

        latest = recent[0] if recent else None
        summary = {
            "blood_pressure": latest.blood_pressure if latest else {"systolic": None, "diastolic": None},
            "heart_rate": latest.heart_rate if latest else None,
            "weight": latest.weight if latest else None,
            "glucose_level": latest.glucose_level if latest else None,
        }
        return {"recent_entries": recent, "summary": summary}

    def _check_can_modify(self, record: HealthRecord, caller: User, action: str) -> None:
        can_modify = (
            (is_role(caller, UserRole.DOCTOR) and record.doctor_id == caller.id)
            or (is_role(caller, UserRole.PATIENT) and record.patient_id == caller.id)
        )
        if not can_modify:
            raise AuthorizationError(f"Not authorized to {action} this record")

    @staticmethod
    def _apply(record: HealthRecord, changes: dict) -> None:
        if "blood_pressure" in changes:
            pressure = changes["blood_pressure"] or {}
            record.systolic = pressure.get("systolic")
            record.diastolic = pressure.get("diastolic")
        for field in VITAL_FIELDS:
            if field in changes:
                setattr(record, field, changes[field])

    def _get_or_404(self, record_id: int) -> HealthRecord:
        record = self.db.query(HealthRecord).filter(HealthRecord.id == record_id).first()
        if not record:
            raise NotFoundError("Health record not found")
        return record
