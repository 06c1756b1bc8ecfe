"""
Pytest Configuration and Shared Fixtures
========================================

This module provides shared fixtures for all MediTrack tests.
Fixtures include database sessions, test clients and sample profiles,
medications, schedules and dose logs.
"""

import os
import sys
from datetime import datetime, time
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests import TEST_DATABASE_URL

# Settings are read on first import of config
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ["MISSED_DOSE_MONITOR_ENABLED"] = "false"
os.environ["SEED_HEALTH_CONTENT"] = "false"

from database import Base, build_engine, get_db
from models import (
    Profile, Medication, Schedule, DoseLog, CaregiverConnection,
    UserRole, DoseStatus
)
from app import app


ALL_DAYS = [0, 1, 2, 3, 4, 5, 6]


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite"""
    engine = build_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(bind=engine)

    yield engine

    # Cleanup
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a test database session"""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=test_engine
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session, test_engine, monkeypatch) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client with database override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Background jobs open their own sessions via database.get_db_context
    import database
    monkeypatch.setattr(database, "SessionLocal", sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=test_engine
    ))

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== PROFILE FIXTURES ====================

def _profile(db_session: Session, email: str, name: str, role: UserRole, tz: str = "UTC") -> Profile:
    profile = Profile(email=email, full_name=name, role=role, timezone=tz)
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def test_patient(db_session: Session) -> Profile:
    """Create and return a test patient"""
    return _profile(db_session, "john.doe@example.com", "John Doe", UserRole.PATIENT)


@pytest.fixture
def other_patient(db_session: Session) -> Profile:
    """A second, unrelated patient"""
    return _profile(db_session, "mary.major@example.com", "Mary Major", UserRole.PATIENT)


@pytest.fixture
def test_caregiver(db_session: Session) -> Profile:
    """Create and return a caregiver (not yet connected)"""
    return _profile(db_session, "jane.doe@example.com", "Jane Doe", UserRole.CAREGIVER)


@pytest.fixture
def connected_caregiver(db_session: Session, test_patient: Profile, test_caregiver: Profile) -> Profile:
    """Caregiver connected to test_patient with missed-dose alerts on"""
    connection = CaregiverConnection(
        patient_id=test_patient.id,
        caregiver_id=test_caregiver.id,
        relationship_label="daughter",
        notify_missed_doses=True
    )
    db_session.add(connection)
    db_session.commit()
    return test_caregiver


# ==================== MEDICATION FIXTURES ====================

@pytest.fixture
def test_medication(db_session: Session, test_patient: Profile) -> Medication:
    """Create and return a test medication linked to test patient"""
    medication = Medication(
        patient_id=test_patient.id,
        name="Metformin",
        dosage="500mg",
        instructions="Take with breakfast",
        active=True
    )
    db_session.add(medication)
    db_session.commit()
    db_session.refresh(medication)
    return medication


@pytest.fixture
def test_schedule(db_session: Session, test_medication: Medication) -> Schedule:
    """Daily 08:00 schedule for test_medication"""
    schedule = Schedule(
        medication_id=test_medication.id,
        time=time(8, 0),
        days_of_week=ALL_DAYS,
        active=True
    )
    db_session.add(schedule)
    db_session.commit()
    db_session.refresh(schedule)
    db_session.refresh(test_medication)
    return schedule


@pytest.fixture
def pending_dose(db_session: Session, test_schedule: Schedule) -> DoseLog:
    """Pending dose log for Monday 2024-01-15 08:00"""
    log = DoseLog(
        schedule_id=test_schedule.id,
        scheduled_time=datetime(2024, 1, 15, 8, 0),
        status=DoseStatus.PENDING
    )
    db_session.add(log)
    db_session.commit()
    db_session.refresh(log)
    return log
