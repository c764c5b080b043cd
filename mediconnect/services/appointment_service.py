"""
Appointment lifecycle: booking, role-scoped listing, status transitions,
cancellation and the visit counter kept on the doctor.

Slot uniqueness is never checked with a read before the insert. The partial
unique index on (doctor_id, date, time_slot) decides, and its IntegrityError
is translated into a 409 for the caller.
"""
from datetime import date, datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.permissions import is_party, is_role
from ..core.security import AuthorizationError, UserRole
from ..models.appointment import (
    Appointment, AppointmentStatus, STATUS_TRANSITIONS,
    TIME_SLOTS, slot_order,
)
from ..models.user import User, doctor_patients
from ..schemas.appointment import AppointmentCreate

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = "all"
DOCTOR_DEFAULT_STATUSES = (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED)


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    # Booking

    def create_appointment(self, patient: User, data: AppointmentCreate) -> Appointment:
        """Book a pending appointment for the calling patient."""
        if not is_role(patient, UserRole.PATIENT):
            raise AuthorizationError("Only patients can request appointments")

        if data.time_slot not in TIME_SLOTS:
            raise ValidationError("Invalid time slot", code="INVALID_TIME_SLOT")

        doctor = self.db.query(User).filter(
            User.id == data.doctor_id,
            User.role == UserRole.DOCTOR
        ).first()
        if not doctor:
            raise NotFoundError("Doctor not found")

        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            date=data.date,
            time_slot=data.time_slot,
            reason=data.reason,
            notes=data.notes or "",
            status=AppointmentStatus.PENDING,
            visited=False,
        )
        self.db.add(appointment)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                f"Slot conflict: doctor {doctor.id} {data.date} {data.time_slot} "
                f"requested by patient {patient.id}"
            )
            raise ConflictError(
                "The selected time slot is already booked",
                code="SLOT_ALREADY_BOOKED"
            )

        self.db.refresh(appointment)
        logger.info(
            f"Appointment {appointment.id} booked: patient {patient.id} with doctor "
            f"{doctor.id} on {appointment.date} at {appointment.time_slot}"
        )
        return appointment

    # Reads

    def list_appointments(
        self,
        caller: User,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Appointment]:
        """List the caller's appointments with the role's default status view."""
        status_filter = self._parse_status_filter(status)
        query = self.db.query(Appointment)

        if is_role(caller, UserRole.PATIENT):
            query = query.filter(Appointment.patient_id == caller.id)
            if status_filter is not None:
                query = query.filter(Appointment.status == status_filter)
        elif is_role(caller, UserRole.DOCTOR):
            query = query.filter(Appointment.doctor_id == caller.id)
            if status_filter is not None:
                query = query.filter(Appointment.status == status_filter)
            elif status is None:
                # Pending requests only show up when asked for explicitly
                query = query.filter(Appointment.status.in_(DOCTOR_DEFAULT_STATUSES))
        else:
            raise AuthorizationError("Access denied")

        if start_date:
            query = query.filter(Appointment.date >= start_date)
        if end_date:
            query = query.filter(Appointment.date <= end_date)

        return query.order_by(Appointment.date.asc(), slot_order, Appointment.id).all()

    def get_appointment(self, appointment_id: int, caller: User) -> Appointment:
        appointment = self._get_or_404(appointment_id)

        if not is_party(caller, appointment.patient_id, appointment.doctor_id):
            raise AuthorizationError("Not authorized to view this appointment")

        return appointment

    def get_availability(self, doctor_id: int, on_date: Optional[date] = None) -> List[str]:
        """Slots of the doctor's day not held by a live appointment."""
        on_date = on_date or date.today()

        doctor = self.db.query(User).filter(
            User.id == doctor_id,
            User.role == UserRole.DOCTOR
        ).first()
        if not doctor:
            raise NotFoundError("Doctor not found")

        booked = {
            row.time_slot
            for row in self.db.query(Appointment.time_slot).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date == on_date,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
        }
        return [slot for slot in TIME_SLOTS if slot not in booked]

    # Transitions

    def update_status(
        self,
        appointment_id: int,
        doctor: User,
        new_status: AppointmentStatus,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Move an appointment along the transition table (owning doctor only)."""
        if not is_role(doctor, UserRole.DOCTOR):
            raise AuthorizationError("Only doctors can update appointment status")

        appointment = self._get_or_404(appointment_id)
        if appointment.doctor_id != doctor.id:
            raise AuthorizationError("Not authorized to update this appointment")

        new_status = AppointmentStatus(new_status)
        current = AppointmentStatus(appointment.status)
        if new_status not in STATUS_TRANSITIONS[current]:
            logger.warning(
                f"Rejected transition {current.value} -> {new_status.value} "
                f"on appointment {appointment.id}"
            )
            raise ValidationError(
                f"Cannot change appointment status from {current.value} to {new_status.value}",
                code="INVALID_TRANSITION"
            )

        appointment.status = new_status
        if notes:
            appointment.notes = notes

        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"Appointment {appointment.id} {current.value} -> {new_status.value}")
        return appointment

    def cancel_appointment(self, appointment_id: int, caller: User) -> Appointment:
        """Cancel on behalf of either party, appending an audit line to the notes."""
        appointment = self._get_or_404(appointment_id)

        if not (
            (is_role(caller, UserRole.PATIENT) and appointment.patient_id == caller.id)
            or (is_role(caller, UserRole.DOCTOR) and appointment.doctor_id == caller.id)
        ):
            raise AuthorizationError("Not authorized to cancel this appointment")

        if appointment.is_terminal:
            raise ValidationError(
                f"Appointment is already {AppointmentStatus(appointment.status).value}",
                code="INVALID_TRANSITION"
            )

        role = UserRole(caller.role).value
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        audit_line = f"Cancelled by {role} on {timestamp}"

        appointment.status = AppointmentStatus.CANCELLED
        appointment.notes = f"{appointment.notes}\n{audit_line}" if appointment.notes else audit_line

        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"Appointment {appointment.id} cancelled by {role} {caller.id}")
        return appointment

    def mark_visited(
        self,
        appointment_id: int,
        doctor: User,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Record that the patient attended; completes the appointment and counts the patient once."""
        if not is_role(doctor, UserRole.DOCTOR):
            raise AuthorizationError("Only doctors can mark appointments as visited")

        appointment = self._get_or_404(appointment_id)
        if appointment.doctor_id != doctor.id:
            raise AuthorizationError("Not authorized to update this appointment")

        if appointment.status not in (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED):
            raise ValidationError(
                "Only confirmed or completed appointments can be marked as visited",
                code="INVALID_TRANSITION"
            )

        appointment.visited = True
        appointment.status = AppointmentStatus.COMPLETED
        if notes:
            appointment.notes = notes
        self.db.flush()

        try:
            first_visit = self._record_patient_served(doctor.id, appointment.patient_id)
            self.db.commit()
        except IntegrityError:
            # Another request recorded this patient between the check and the insert;
            # keep the visit, skip the count
            self.db.rollback()
            first_visit = False
            appointment = self._get_or_404(appointment_id)
            appointment.visited = True
            appointment.status = AppointmentStatus.COMPLETED
            if notes:
                appointment.notes = notes
            self.db.commit()

        self.db.refresh(appointment)
        self.db.expire(doctor)

        logger.info(
            f"Appointment {appointment.id} marked visited"
            + (f"; doctor {doctor.id} served new patient {appointment.patient_id}" if first_visit else "")
        )
        return appointment

    # Helpers

    def _is_patient_served(self, doctor_id: int, patient_id: int) -> bool:
        return self.db.execute(
            doctor_patients.select().where(
                doctor_patients.c.doctor_id == doctor_id,
                doctor_patients.c.patient_id == patient_id,
            )
        ).first() is not None

    def _record_patient_served(self, doctor_id: int, patient_id: int) -> bool:
        """Add the patient to the doctor's served set; True when newly added.

        The composite key rejects a row inserted concurrently after the check,
        raising IntegrityError for the caller to roll back.
        """
        if self._is_patient_served(doctor_id, patient_id):
            return False

        self.db.execute(
            insert(doctor_patients).values(doctor_id=doctor_id, patient_id=patient_id)
        )
        self.db.execute(
            update(User)
            .where(User.id == doctor_id)
            .values(patients_count=User.patients_count + 1)
        )
        return True

    def _get_or_404(self, appointment_id: int) -> Appointment:
        appointment = self.db.query(Appointment).filter(
            Appointment.id == appointment_id
        ).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    @staticmethod
    def _parse_status_filter(status: Optional[str]) -> Optional[AppointmentStatus]:
        """None means no status constraint ('all' or absent)."""
        if status is None or status == STATUS_FILTER_ALL:
            return None
        try:
            return AppointmentStatus(status)
        except ValueError:
            raise ValidationError("Invalid status value", code="INVALID_STATUS")
