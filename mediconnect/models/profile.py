from sqlalchemy import Column, Integer, String, ForeignKey, Date, Float, Text, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..core.security import UserRole


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    role = Column(
        SQLEnum(UserRole, name="profile_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    # Common
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)

    # Doctor information
    specialization = Column(String(255), nullable=True)
    qualifications = Column(JSON, nullable=False, default=list)
    experience = Column(String(255), nullable=True)
    about = Column(Text, nullable=True)

    # Patient information
    height = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    conditions = Column(JSON, nullable=False, default=list)
    allergies = Column(JSON, nullable=False, default=list)
    emergency_contact = Column(JSON, nullable=True)

    # Relationships
    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile(id={self.id}, user_id={self.user_id}, role='{self.role}')>"
