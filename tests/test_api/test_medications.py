"""
Tests for Medications and Schedules API
=======================================

Tests medication CRUD, schedules, weekly counts and ownership rules.
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from models import Medication
from tests import auth_headers


# ==================== FIXTURES ====================

@pytest.fixture
def medication_create_data():
    """Sample data for creating a medication"""
    return {
        "name": "Lisinopril",
        "dosage": "10mg",
        "instructions": "Take in the morning",
        "time": "08:30",
        "days_of_week": [1, 3, 5]
    }


# ==================== MEDICATIONS ====================

class TestCreateMedication:

    @pytest.mark.api
    def test_create_medication_with_schedule(self, client: TestClient, test_patient, medication_create_data):
        response = client.post(
            "/api/v1/medications/", json=medication_create_data, headers=auth_headers(test_patient)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "Lisinopril"
        assert data["patient_id"] == test_patient.id
        assert len(data["schedules"]) == 1
        assert data["schedules"][0]["time"] == "08:30"
        assert data["schedules"][0]["days_of_week"] == [1, 3, 5]

    @pytest.mark.api
    def test_days_default_to_every_day(self, client: TestClient, test_patient, medication_create_data):
        del medication_create_data["days_of_week"]
        response = client.post(
            "/api/v1/medications/", json=medication_create_data, headers=auth_headers(test_patient)
        )

        assert response.json()["schedules"][0]["days_of_week"] == [0, 1, 2, 3, 4, 5, 6]

    @pytest.mark.api
    def test_invalid_weekday(self, client: TestClient, test_patient, medication_create_data):
        medication_create_data["days_of_week"] = [7]
        response = client.post(
            "/api/v1/medications/", json=medication_create_data, headers=auth_headers(test_patient)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.api
    def test_time_with_utc_offset_rejected(self, client: TestClient, db_session, test_patient, medication_create_data):
        medication_create_data["time"] = "08:00+02:00"
        response = client.post(
            "/api/v1/medications/", json=medication_create_data, headers=auth_headers(test_patient)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert db_session.query(Medication).count() == 0

    @pytest.mark.api
    def test_caregiver_cannot_add(self, client: TestClient, test_caregiver, medication_create_data):
        response = client.post(
            "/api/v1/medications/", json=medication_create_data, headers=auth_headers(test_caregiver)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestReadMedications:

    @pytest.mark.api
    def test_list_own(self, client: TestClient, test_patient, test_schedule):
        response = client.get("/api/v1/medications/", headers=auth_headers(test_patient))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["medications"][0]["schedules"][0]["time"] == "08:00"

    @pytest.mark.api
    def test_connected_caregiver_reads(self, client: TestClient, test_patient, test_schedule, connected_caregiver):
        response = client.get(
            f"/api/v1/medications/?patient_id={test_patient.id}",
            headers=auth_headers(connected_caregiver)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total"] == 1

    @pytest.mark.api
    def test_stranger_denied(self, client: TestClient, test_patient, other_patient, test_schedule):
        response = client.get(
            f"/api/v1/medications/?patient_id={test_patient.id}",
            headers=auth_headers(other_patient)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.api
    def test_get_not_found(self, client: TestClient, test_patient):
        response = client.get("/api/v1/medications/9999", headers=auth_headers(test_patient))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.api
    def test_weekly_counts(self, client: TestClient, test_patient, test_schedule):
        response = client.get("/api/v1/medications/weekly-counts", headers=auth_headers(test_patient))

        assert response.status_code == status.HTTP_200_OK
        counts = response.json()["counts"]
        assert counts == {str(day): 1 for day in range(7)}


class TestUpdateMedication:

    @pytest.mark.api
    def test_update(self, client: TestClient, test_patient, test_medication):
        response = client.patch(
            f"/api/v1/medications/{test_medication.id}",
            json={"dosage": "1000mg"},
            headers=auth_headers(test_patient)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["dosage"] == "1000mg"

    @pytest.mark.api
    def test_caregiver_cannot_update(self, client: TestClient, test_medication, connected_caregiver):
        response = client.patch(
            f"/api/v1/medications/{test_medication.id}",
            json={"dosage": "1000mg"},
            headers=auth_headers(connected_caregiver)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.api
    def test_deactivate(self, client: TestClient, test_patient, test_medication):
        response = client.delete(
            f"/api/v1/medications/{test_medication.id}", headers=auth_headers(test_patient)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["active"] is False

        listing = client.get("/api/v1/medications/", headers=auth_headers(test_patient))
        assert listing.json()["total"] == 0


# ==================== SCHEDULES ====================

class TestSchedules:

    @pytest.mark.api
    def test_add_and_list(self, client: TestClient, test_patient, test_medication):
        response = client.post(
            f"/api/v1/medications/{test_medication.id}/schedules",
            json={"time": "21:00", "days_of_week": [0, 6]},
            headers=auth_headers(test_patient)
        )
        assert response.status_code == status.HTTP_201_CREATED

        listing = client.get(
            f"/api/v1/medications/{test_medication.id}/schedules", headers=auth_headers(test_patient)
        )
        assert [s["time"] for s in listing.json()] == ["21:00"]

    @pytest.mark.api
    def test_schedule_time_with_utc_offset_rejected(self, client: TestClient, test_patient, test_schedule):
        created = client.post(
            f"/api/v1/medications/{test_schedule.medication_id}/schedules",
            json={"time": "21:00+02:00"},
            headers=auth_headers(test_patient)
        )
        updated = client.patch(
            f"/api/v1/schedules/{test_schedule.id}",
            json={"time": "09:00Z"},
            headers=auth_headers(test_patient)
        )

        assert created.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert updated.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.api
    def test_update_days(self, client: TestClient, test_patient, test_schedule):
        response = client.patch(
            f"/api/v1/schedules/{test_schedule.id}",
            json={"days_of_week": [2, 2, 4]},
            headers=auth_headers(test_patient)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["days_of_week"] == [2, 4]

    @pytest.mark.api
    def test_deactivate(self, client: TestClient, test_patient, test_schedule):
        response = client.delete(f"/api/v1/schedules/{test_schedule.id}", headers=auth_headers(test_patient))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["active"] is False
