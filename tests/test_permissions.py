from types import SimpleNamespace

from mediconnect.core.permissions import is_owner, is_owner_or_role, is_party, is_role
from mediconnect.core.security import UserRole

patient = SimpleNamespace(id=1, role=UserRole.PATIENT)
doctor = SimpleNamespace(id=2, role="doctor")
admin = SimpleNamespace(id=3, role=UserRole.ADMIN)


class TestRolePredicates:

    def test_is_role(self):
        assert is_role(patient, UserRole.PATIENT)
        assert is_role(doctor, UserRole.DOCTOR)
        assert is_role(admin, UserRole.DOCTOR, UserRole.ADMIN)
        assert not is_role(patient, UserRole.DOCTOR, UserRole.ADMIN)

    def test_missing_caller(self):
        assert not is_role(None, UserRole.PATIENT)
        assert not is_owner(None, 1)
        assert not is_party(None, 1, 2)

    def test_is_owner(self):
        assert is_owner(patient, 1)
        assert not is_owner(patient, 2)
        assert not is_owner(patient, None)

    def test_is_owner_or_role(self):
        assert is_owner_or_role(patient, 1, UserRole.ADMIN)
        assert is_owner_or_role(admin, 1, UserRole.ADMIN)
        assert not is_owner_or_role(doctor, 1, UserRole.ADMIN)

    def test_is_party(self):
        assert is_party(patient, 1, 2)
        assert is_party(doctor, 1, 2)
        assert not is_party(admin, 1, 2)
        assert not is_party(doctor, 1, None)
