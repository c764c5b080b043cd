from mediconnect.models.appointment import Appointment
from mediconnect.models.health_record import HealthRecord
from mediconnect.models.profile import Profile
from mediconnect.models.user import User

from .conftest import ADMIN_PASSWORD, book


def delete_user(client, headers, user_id, password=ADMIN_PASSWORD):
    body = {"password": password} if password is not None else None
    return client.request("DELETE", f"/api/admin/users/{user_id}", json=body, headers=headers)


class TestAdminListing:

    def test_list_users_excludes_admins(self, client, admin, patient, doctor):
        response = client.get("/api/admin/users", headers=admin[0])
        assert response.status_code == 200

        body = response.json()
        assert body["count"] == 2
        assert {u["role"] for u in body["data"]} == {"patient", "doctor"}

    def test_list_by_role(self, client, admin, patient, other_patient, doctor):
        doctors = client.get("/api/admin/doctors", headers=admin[0]).json()
        patients = client.get("/api/admin/patients", headers=admin[0]).json()

        assert [u["id"] for u in doctors["data"]] == [doctor[1]["id"]]
        assert patients["count"] == 2

    def test_user_detail_with_profile(self, client, admin, doctor):
        client.get("/api/profile/me", headers=doctor[0])

        response = client.get(f"/api/admin/users/{doctor[1]['id']}", headers=admin[0])
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["user"]["email"] == "doctor@example.com"
        assert data["profile"]["role"] == "doctor"

    def test_user_detail_without_profile(self, client, admin, patient):
        data = client.get(f"/api/admin/users/{patient[1]['id']}", headers=admin[0]).json()["data"]
        assert data["profile"] is None

    def test_unknown_user(self, client, admin):
        assert client.get("/api/admin/users/9999", headers=admin[0]).status_code == 404

    def test_non_admins_are_refused(self, client, patient, doctor):
        for caller in (patient, doctor):
            response = client.get("/api/admin/users", headers=caller[0])
            assert response.status_code == 403
            assert response.json()["code"] == "ROLE_REQUIRED"


class TestAdminDelete:

    def test_delete_patient_cascades(self, client, admin, patient, doctor, db_session):
        patient_id = patient[1]["id"]
        client.get("/api/profile/me", headers=patient[0])
        appointment_id = book(client, patient[0], doctor[1]["id"]).json()["data"]["id"]
        client.put(f"/api/appointments/{appointment_id}", json={"status": "confirmed"}, headers=doctor[0])
        client.put(f"/api/appointments/{appointment_id}/visited", headers=doctor[0])
        client.post("/api/health/record", json={"heartRate": 70}, headers=patient[0])

        response = delete_user(client, admin[0], patient_id)
        assert response.status_code == 200
        assert response.json()["success"] is True

        assert db_session.query(User).filter(User.id == patient_id).first() is None
        assert db_session.query(Profile).filter(Profile.user_id == patient_id).count() == 0
        assert db_session.query(Appointment).filter(Appointment.patient_id == patient_id).count() == 0
        assert db_session.query(HealthRecord).filter(HealthRecord.patient_id == patient_id).count() == 0

        doctor_user = client.get("/api/auth/verify", headers=doctor[0]).json()["data"]
        assert doctor_user["patientsCount"] == 0
        assert doctor_user["patientsServed"] == []

    def test_deleted_user_token_stops_working(self, client, admin, patient):
        delete_user(client, admin[0], patient[1]["id"])

        response = client.get("/api/auth/verify", headers=patient[0])
        assert response.status_code == 401
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_password_required(self, client, admin, patient):
        response = delete_user(client, admin[0], patient[1]["id"], password=None)
        assert response.status_code == 400
        assert response.json()["code"] == "PASSWORD_REQUIRED"

    def test_wrong_password(self, client, admin, patient):
        response = delete_user(client, admin[0], patient[1]["id"], password="not-it")
        assert response.status_code == 401

    def test_admins_cannot_be_deleted(self, client, admin):
        response = delete_user(client, admin[0], admin[1]["id"])
        assert response.status_code == 400
        assert response.json()["code"] == "ADMIN_UNDELETABLE"

    def test_delete_unknown_user(self, client, admin):
        assert delete_user(client, admin[0], 9999).status_code == 404
