from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.exceptions import ValidationError
from ..core.security import UserRole
from ..models.profile import Profile
from ..models.user import User
from ..schemas.profile import (
    AdminProfileResponse, AdminProfileUpdate, DoctorProfileResponse,
    PatientProfileResponse, ProfileUpdate,
)

logger = logging.getLogger(__name__)

# Profile fields that are also stored on the user row
USER_MIRRORED_FIELDS = ("name", "phone", "specialization", "date_of_birth", "gender", "height", "weight")
PROFILE_FIELDS = (
    "date_of_birth", "gender", "height", "weight", "conditions", "allergies",
    "specialization", "experience", "about", "qualifications",
)


def to_profile_response(profile: Profile):
    """Pick the role-shaped response schema for a profile row."""
    match UserRole(profile.role):
        case UserRole.DOCTOR:
            return DoctorProfileResponse.model_validate(profile)
        case UserRole.PATIENT:
            return PatientProfileResponse.model_validate(profile)
        case UserRole.ADMIN:
            return AdminProfileResponse.model_validate(profile)


def find_profile(db: Session, user_id: int) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


class ProfileService:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create_profile(self, user: User) -> Profile:
        """Return the user's profile, seeding one from the user row on first access."""
        profile = find_profile(self.db, user.id)
        if profile:
            return profile

        profile = Profile(
            user_id=user.id,
            role=user.role,
            date_of_birth=user.date_of_birth,
            gender=user.gender,
            qualifications=[],
            conditions=[],
            allergies=[],
        )

        match UserRole(user.role):
            case UserRole.DOCTOR:
                profile.specialization = user.specialization
                profile.experience = ""
                profile.about = ""
            case UserRole.PATIENT:
                profile.height = user.height
                profile.weight = user.weight
                profile.emergency_contact = user.emergency_contact
            case UserRole.ADMIN:
                if not profile.gender:
                    profile.gender = "prefer-not-to-say"

        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)

        logger.info(f"Created {UserRole(user.role).value} profile for user {user.id}")
        return profile

    def update_profile(self, user: User, data: ProfileUpdate) -> Profile:
        """Apply the fields present in the request to the profile and the user row."""
        profile = self.get_or_create_profile(user)
        changes = data.model_dump(exclude_unset=True)

        email = changes.pop("email", None)
        if email and email.lower() != user.email:
            raise ValidationError("Email cannot be changed", code="EMAIL_IMMUTABLE")

        # A doctor keeps their specialization when asked to blank it
        if user.role == UserRole.DOCTOR and "specialization" in changes and not changes["specialization"]:
            changes["specialization"] = user.specialization

        for field in PROFILE_FIELDS:
            if field in changes:
                setattr(profile, field, changes[field])

        if "emergency_contact" in changes:
            merged = dict(profile.emergency_contact or {})
            merged.update({k: v for k, v in (changes["emergency_contact"] or {}).items() if v is not None})
            profile.emergency_contact = merged
            user.emergency_contact = merged

        for field in USER_MIRRORED_FIELDS:
            if field in changes:
                setattr(user, field, changes[field])

        self.db.commit()
        self.db.refresh(profile)

        logger.info(f"Profile updated for user {user.id}: {sorted(changes)}")
        return profile

    def update_admin_profile(self, admin: User, data: AdminProfileUpdate) -> Profile:
        changes = data.model_dump(exclude_unset=True)

        for field, value in changes.items():
            setattr(admin, field, value)
        if changes:
            self.db.commit()
            logger.info(f"Admin profile updated for user {admin.id}: {sorted(changes)}")

        profile = self.get_or_create_profile(admin)
        for field in ("date_of_birth", "gender"):
            if field in changes:
                setattr(profile, field, changes[field])
        self.db.commit()
        self.db.refresh(profile)
        return profile
