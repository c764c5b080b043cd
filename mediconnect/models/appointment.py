from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Boolean, Text, Index, case, text, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

# Eight one-hour slots per doctor per day, in wall-clock order
TIME_SLOTS = (
    "9:00 AM", "10:00 AM", "11:00 AM", "12:00 PM",
    "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM",
)


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


TERMINAL_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED})

# Allowed doctor-driven moves; terminal states have no outgoing edges
STATUS_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

# A cancelled booking releases its slot
_LIVE_SLOT = text("status != 'cancelled'")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_doctor_slot",
            "doctor_id", "date", "time_slot",
            unique=True,
            sqlite_where=_LIVE_SLOT,
            postgresql_where=_LIVE_SLOT,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Parties
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Slot
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(20), nullable=False)

    # Appointment details
    reason = Column(Text, nullable=False)
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )
    visited = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=False, default="")

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("User", foreign_keys=[patient_id], lazy="joined")
    doctor = relationship("User", foreign_keys=[doctor_id], lazy="joined")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, "
            f"date='{self.date}', time_slot='{self.time_slot}', status='{self.status}')>"
        )


# ORDER BY expression placing slots in wall-clock order
slot_order = case(
    {slot: position for position, slot in enumerate(TIME_SLOTS)},
    value=Appointment.time_slot,
    else_=len(TIME_SLOTS),
)
