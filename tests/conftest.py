import os
import datetime as dt

import pytest

# Settings are read at import time
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["BCRYPT_ROUNDS"] = "4"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mediconnect.main import app
from mediconnect.core.database import get_db, Base
from mediconnect.core.security import UserRole, get_password_hash
from mediconnect.models.user import User

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

APPOINTMENT_DATE = (dt.date.today() + dt.timedelta(days=30)).isoformat()

# Test data
patient_data = {
    "name": "Test Patient",
    "email": "patient@example.com",
    "password": "patient123",
    "passwordConfirm": "patient123",
    "role": "patient",
    "dateOfBirth": "1990-01-01",
    "gender": "female",
    "height": 170,
    "weight": 65,
}

other_patient_data = {
    **patient_data,
    "name": "Other Patient",
    "email": "other.patient@example.com",
}

doctor_data = {
    "name": "Test Doctor",
    "email": "doctor@example.com",
    "password": "doctor123",
    "passwordConfirm": "doctor123",
    "role": "doctor",
    "dateOfBirth": "1980-01-01",
    "gender": "male",
    "specialization": "Cardiology",
}

other_doctor_data = {
    **doctor_data,
    "name": "Other Doctor",
    "email": "other.doctor@example.com",
    "specialization": "Dermatology",
}

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin12345"


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def register(client, data):
    """Register a user and return (auth headers, user json)."""
    response = client.post("/api/auth/register", json=data)
    assert response.status_code == 201, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


@pytest.fixture
def patient(client):
    return register(client, patient_data)


@pytest.fixture
def other_patient(client):
    return register(client, other_patient_data)


@pytest.fixture
def doctor(client):
    return register(client, doctor_data)


@pytest.fixture
def other_doctor(client):
    return register(client, other_doctor_data)


@pytest.fixture
def admin(client, db_session):
    # Admins never come through /register
    user = User(
        name="Site Admin",
        email=ADMIN_EMAIL,
        password_hash=get_password_hash(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)

    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}, response.json()["user"]


def book(client, headers, doctor_id, time_slot="10:00 AM", date=APPOINTMENT_DATE, reason="Checkup"):
    return client.post(
        "/api/appointments",
        json={"doctorId": doctor_id, "date": date, "timeSlot": time_slot, "reason": reason},
        headers=headers,
    )
