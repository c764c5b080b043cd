from datetime import timedelta

from mediconnect.core.security import JWTConfig, UserRole, create_access_token
from mediconnect.main import app

from .conftest import doctor_data, patient_data

test_login_data = {
    "email": "patient@example.com",
    "password": "patient123"
}


class TestRegistration:

    def test_register_patient(self, client):
        """Test patient registration returns a token and the user."""
        response = client.post("/api/auth/register", json=patient_data)
        assert response.status_code == 201

        data = response.json()
        assert data["success"] is True
        assert data["token"]
        assert data["user"]["email"] == patient_data["email"]
        assert data["user"]["role"] == "patient"
        assert data["user"]["height"] == 170
        assert "password" not in data["user"]
        assert "passwordHash" not in data["user"]

    def test_register_doctor(self, client):
        response = client.post("/api/auth/register", json=doctor_data)
        assert response.status_code == 201

        user = response.json()["user"]
        assert user["role"] == "doctor"
        assert user["specialization"] == "Cardiology"
        assert user["patientsCount"] == 0
        assert user["patientsServed"] == []

    def test_register_email_is_case_insensitive(self, client):
        client.post("/api/auth/register", json=patient_data)

        shouted = {**patient_data, "email": patient_data["email"].upper()}
        response = client.post("/api/auth/register", json=shouted)
        assert response.status_code == 400
        assert response.json()["error"] == "Email already exists"

    def test_register_duplicate_email(self, client):
        """Test registration with duplicate email."""
        client.post("/api/auth/register", json=patient_data)

        response = client.post("/api/auth/register", json=patient_data)
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["code"] == "EMAIL_EXISTS"

    def test_register_doctor_without_specialization(self, client):
        invalid_data = {k: v for k, v in doctor_data.items() if k != "specialization"}

        response = client.post("/api/auth/register", json=invalid_data)
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_register_patient_without_measurements(self, client):
        invalid_data = {k: v for k, v in patient_data.items() if k not in ("height", "weight")}

        response = client.post("/api/auth/register", json=invalid_data)
        assert response.status_code == 400
        errors = response.json()["errors"]
        assert any("height" in field for field in errors)

    def test_register_password_mismatch(self, client):
        invalid_data = {**patient_data, "passwordConfirm": "different1"}

        response = client.post("/api/auth/register", json=invalid_data)
        assert response.status_code == 400

    def test_register_short_password(self, client):
        """Test registration with invalid password."""
        invalid_data = {**patient_data, "password": "weak", "passwordConfirm": "weak"}

        response = client.post("/api/auth/register", json=invalid_data)
        assert response.status_code == 400

    def test_register_admin_rejected(self, client):
        invalid_data = {**patient_data, "role": "admin"}

        response = client.post("/api/auth/register", json=invalid_data)
        assert response.status_code == 400


class TestLogin:

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/auth/register", json=patient_data)

        response = client.post("/api/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["token"]
        assert data["user"]["email"] == test_login_data["email"]

    def test_login_invalid_credentials(self, client):
        """Test login with invalid credentials."""
        invalid_login = {
            "email": "nonexistent@example.com",
            "password": "wrongpassword"
        }

        response = client.post("/api/auth/login", json=invalid_login)
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        client.post("/api/auth/register", json=patient_data)

        wrong_login = {**test_login_data, "password": "wrongpassword"}
        response = client.post("/api/auth/login", json=wrong_login)
        assert response.status_code == 401


class TestTokenVerification:

    def test_verify_current_user(self, client, patient):
        headers, user = patient

        response = client.get("/api/auth/verify", headers=headers)
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["data"]["id"] == user["id"]
        assert data["data"]["email"] == patient_data["email"]

    def test_missing_token(self, client):
        response = client.get("/api/auth/verify")
        assert response.status_code == 401
        assert response.json()["code"] == "NO_TOKEN"

    def test_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/auth/verify", headers=headers)
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_expired_token(self, client, patient):
        _, user = patient
        token = create_access_token(
            app.state.jwt_config, user["id"], user["email"], UserRole.PATIENT,
            expires_delta=timedelta(minutes=-5),
        )

        response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["code"] == "TOKEN_EXPIRED"

    def test_token_for_wrong_audience(self, client, patient):
        _, user = patient
        config = app.state.jwt_config
        foreign = JWTConfig(
            secret=config.secret,
            algorithm=config.algorithm,
            expire_minutes=config.expire_minutes,
            issuer=config.issuer,
            audience="someone-else",
        )
        token = create_access_token(foreign, user["id"], user["email"], UserRole.PATIENT)

        response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_token_for_unknown_user(self, client):
        token = create_access_token(app.state.jwt_config, 9999, "ghost@example.com", UserRole.PATIENT)

        response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_logout(self, client):
        """Test user logout."""
        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Logout successful"


class FakeRedis:
    def __init__(self):
        self.counts = {}

    def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def expire(self, key, seconds):
        return True


class TestRateLimiting:

    def test_login_rate_limited(self, client, monkeypatch):
        from mediconnect.core import database
        from mediconnect.core.config import settings

        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 2)
        fake = FakeRedis()
        app.dependency_overrides[database.get_redis] = lambda: fake
        try:
            statuses = [
                client.post("/api/auth/login", json=test_login_data).status_code
                for _ in range(3)
            ]
        finally:
            del app.dependency_overrides[database.get_redis]

        assert statuses == [401, 401, 429]


class TestServiceEndpoints:

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["endpoints"]["appointments"] == "/api/appointments"

    def test_api_test(self, client):
        assert client.get("/api/test").json()["success"] is True

    def test_unknown_route(self, client):
        response = client.get("/api/nowhere")
        assert response.status_code == 404
        assert response.json()["success"] is False
