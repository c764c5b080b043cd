"""
Role predicates shared by every router and service.

Callers are anything exposing ``id`` and ``role`` (an ORM ``User`` or a decoded
token payload). The predicates hold no state and never touch the database.
"""
from typing import Any, Optional

from .security import UserRole


def _role_of(caller: Any) -> Optional[UserRole]:
    role = getattr(caller, "role", None)
    if role is None:
        return None
    return UserRole(role)


def is_role(caller: Any, *roles: UserRole) -> bool:
    """True when the caller holds one of ``roles``."""
    return caller is not None and _role_of(caller) in roles


def is_owner(caller: Any, owner_id: Optional[int]) -> bool:
    return caller is not None and owner_id is not None and caller.id == owner_id


def is_owner_or_role(caller: Any, owner_id: Optional[int], role: UserRole) -> bool:
    """True when the caller owns the resource or holds ``role``."""
    return is_owner(caller, owner_id) or is_role(caller, role)


def is_party(caller: Any, *owner_ids: Optional[int]) -> bool:
    """True when the caller is any of the listed owners."""
    return any(is_owner(caller, owner_id) for owner_id in owner_ids)
