from sqlalchemy import Column, Integer, String, DateTime, Date, Float, ForeignKey, Table, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..core.security import UserRole

# The doctor's patientsServed set; the composite key keeps each patient once
doctor_patients = Table(
    "doctor_patients",
    Base.metadata,
    Column("doctor_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("patient_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("first_visit_at", DateTime, server_default=func.now()),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False, default="")
    role = Column(
        SQLEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    # Doctor fields
    specialization = Column(String(255), nullable=True)
    patients_count = Column(Integer, nullable=False, default=0)

    # Demographics
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)

    # Patient fields
    height = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact_relationship = Column(String(100), nullable=True)
    emergency_contact_phone = Column(String(30), nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    profile = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    patients_served = relationship(
        "User",
        secondary=doctor_patients,
        primaryjoin=id == doctor_patients.c.doctor_id,
        secondaryjoin=id == doctor_patients.c.patient_id,
        viewonly=True,
    )

    @property
    def emergency_contact(self):
        if not any((
            self.emergency_contact_name,
            self.emergency_contact_relationship,
            self.emergency_contact_phone,
        )):
            return None
        return {
            "name": self.emergency_contact_name or "",
            "relationship": self.emergency_contact_relationship or "",
            "phone": self.emergency_contact_phone or "",
        }

    @emergency_contact.setter
    def emergency_contact(self, contact):
        contact = contact or {}
        self.emergency_contact_name = contact.get("name")
        self.emergency_contact_relationship = contact.get("relationship")
        self.emergency_contact_phone = contact.get("phone")

    @property
    def patients_served_ids(self):
        return [patient.id for patient in self.patients_served]

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
