from sqlalchemy import Column, Integer, ForeignKey, DateTime, Float, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base


class HealthRecord(Base):
    __tablename__ = "health_records"

    id = Column(Integer, primary_key=True, index=True)

    # Ownership: the record always belongs to a patient; doctor is set when a doctor authored it
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    date = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    # Vitals
    systolic = Column(Float, nullable=True)
    diastolic = Column(Float, nullable=True)
    heart_rate = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    glucose_level = Column(Float, nullable=True)

    # Observations
    symptoms = Column(Text, nullable=True)
    medications = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    patient = relationship("User", foreign_keys=[patient_id], lazy="joined")
    doctor = relationship("User", foreign_keys=[doctor_id], lazy="joined")

    @property
    def blood_pressure(self):
        return {"systolic": self.systolic, "diastolic": self.diastolic}

    def __repr__(self):
        return f"<HealthRecord(id={self.id}, patient_id={self.patient_id}, date='{self.date}')>"
