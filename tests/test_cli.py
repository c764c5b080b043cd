import pytest

from mediconnect.cli import build_parser, create_admin, list_users, reset_password, seed_users
from mediconnect.core.security import UserRole, verify_password


class TestMaintenanceCommands:

    def test_create_admin_can_log_in(self, client, db_session):
        admin = create_admin(db_session, "Ops Admin", "Ops@Example.com", "opsadmin1")
        assert admin.role == UserRole.ADMIN
        assert admin.email == "ops@example.com"
        assert admin.profile is not None

        response = client.post("/api/auth/login", json={"email": "ops@example.com", "password": "opsadmin1"})
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

    def test_create_admin_duplicate_email(self, db_session):
        create_admin(db_session, "Ops Admin", "ops@example.com", "opsadmin1")
        with pytest.raises(ValueError):
            create_admin(db_session, "Again", "ops@example.com", "opsadmin1")

    def test_seed_is_idempotent(self, db_session):
        assert len(seed_users(db_session)) == 3
        assert seed_users(db_session) == []

        doctors = list_users(db_session, UserRole.DOCTOR)
        assert [d.email for d in doctors] == ["doctor@gmail.com"]
        assert len(list_users(db_session)) == 3

    def test_reset_password(self, db_session):
        seed_users(db_session)

        user = reset_password(db_session, "Patient@gmail.com", "changed123")
        assert verify_password("changed123", user.password_hash)

        with pytest.raises(ValueError):
            reset_password(db_session, "nobody@gmail.com", "changed123")

    def test_parser(self):
        args = build_parser().parse_args(["list-users", "--role", "doctor"])
        assert args.command == "list-users"
        assert args.role == "doctor"
