"""
Tests for Seed Data
"""

import pytest

from models import Alert, DoseLog, DoseStatus, HealthTopic, Medication, Profile, UserRole
from scripts.seed_data import seed_demo_data, DEMO_PATIENT_EMAIL


@pytest.mark.integration
def test_seeds_demo_patient(db_session):
    patient = seed_demo_data(db_session, days=3)

    assert patient.email == DEMO_PATIENT_EMAIL
    assert patient.role == UserRole.PATIENT
    assert db_session.query(Profile).count() == 2
    assert db_session.query(Medication).filter(Medication.patient_id == patient.id).count() == 4
    assert db_session.query(HealthTopic).count() > 0


@pytest.mark.integration
def test_history_is_resolved(db_session):
    seed_demo_data(db_session, days=3)

    logs = db_session.query(DoseLog).all()
    assert len(logs) > 0
    assert all(log.status != DoseStatus.PENDING for log in logs)
    assert all(log.taken_at is not None for log in logs if log.status == DoseStatus.TAKEN)

    missed = [log for log in logs if log.status == DoseStatus.MISSED]
    assert db_session.query(Alert).count() == len(missed)


@pytest.mark.integration
def test_rerun_is_idempotent(db_session):
    seed_demo_data(db_session, days=3)
    logs = db_session.query(DoseLog).count()

    seed_demo_data(db_session, days=3)

    assert db_session.query(Profile).count() == 2
    assert db_session.query(DoseLog).count() == logs
