#!/usr/bin/env python
"""
Seed Data
Script to seed the database with a demo patient, caregiver and dose history
for development
"""

import sys
import os
import argparse
import logging
import random
from datetime import datetime, timedelta, time
from typing import List, Tuple

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import SessionLocal, engine, Base, reset_db
from models import (
    Profile, Medication, Schedule, DoseLog, Alert, CaregiverConnection,
    UserRole, DoseStatus
)
from knowledge_base import seed_health_content
from tools.dose_materializer import compliance_percent, weekday_index


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEMO_PATIENT_EMAIL = "demo.patient@meditrack.app"
DEMO_CAREGIVER_EMAIL = "demo.caregiver@meditrack.app"


def create_tables():
    """Create all database tables"""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully")


def seed_profiles(db) -> Tuple[Profile, Profile]:
    """Create the demo patient and caregiver and connect them"""
    patient = db.query(Profile).filter(Profile.email == DEMO_PATIENT_EMAIL).first()
    if patient:
        logger.info("Demo profiles already exist")
        caregiver = db.query(Profile).filter(Profile.email == DEMO_CAREGIVER_EMAIL).first()
        return patient, caregiver

    patient = Profile(
        email=DEMO_PATIENT_EMAIL,
        full_name="John Doe",
        role=UserRole.PATIENT,
        timezone="America/New_York"
    )
    caregiver = Profile(
        email=DEMO_CAREGIVER_EMAIL,
        full_name="Jane Doe",
        role=UserRole.CAREGIVER,
        timezone="America/New_York"
    )
    db.add_all([patient, caregiver])
    db.flush()

    db.add(CaregiverConnection(
        patient_id=patient.id,
        caregiver_id=caregiver.id,
        relationship_label="daughter",
        notify_missed_doses=True
    ))
    db.flush()

    logger.info(f"Created patient {patient.id} and caregiver {caregiver.id}")
    return patient, caregiver


def seed_medications(db, patient_id: int) -> List[Medication]:
    """Add medications with their schedules"""
    logger.info("Adding medications...")

    medications_data = [
        ("Metformin", "1000mg", "Take with meals to reduce stomach upset", [time(8, 0), time(18, 0)], None),
        ("Lisinopril", "20mg", "Take in the morning", [time(8, 0)], None),
        ("Atorvastatin", "40mg", "Take at bedtime", [time(21, 0)], None),
        ("Vitamin D", "2000 IU", "", [time(12, 0)], [0, 6]),
    ]

    medications = []
    for name, dosage, instructions, times, days in medications_data:
        medication = Medication(
            patient_id=patient_id,
            name=name,
            dosage=dosage,
            instructions=instructions,
            active=True
        )
        for at in times:
            medication.schedules.append(Schedule(
                time=at,
                days_of_week=days if days is not None else [0, 1, 2, 3, 4, 5, 6],
                active=True
            ))
        db.add(medication)
        medications.append(medication)

    db.flush()
    logger.info(f"Added {len(medications)} medications")
    return medications


def seed_dose_history(db, medications: List[Medication], caregiver_id: int, days: int = 14) -> int:
    """Resolved dose logs for the past days, with alerts for the missed ones"""
    logger.info(f"Seeding {days} days of dose history...")

    random.seed(42)  # For reproducibility

    today = datetime.now().replace(second=0, microsecond=0)
    created = 0

    for day_offset in range(1, days + 1):  # Skip today
        day = today - timedelta(days=day_offset)

        for medication in medications:
            for schedule in medication.schedules:
                if weekday_index(day) not in schedule.days_of_week:
                    continue

                scheduled = datetime.combine(day.date(), schedule.time)
                roll = random.random()
                if roll < 0.85:
                    status = DoseStatus.TAKEN
                    taken_at = scheduled + timedelta(minutes=random.randint(-10, 40))
                elif roll < 0.92:
                    status = DoseStatus.SKIPPED
                    taken_at = None
                else:
                    status = DoseStatus.MISSED
                    taken_at = None

                log = DoseLog(
                    schedule_id=schedule.id,
                    scheduled_time=scheduled,
                    status=status,
                    taken_at=taken_at
                )
                db.add(log)
                db.flush()
                created += 1

                if status == DoseStatus.MISSED:
                    db.add(Alert(
                        dose_log_id=log.id,
                        caregiver_id=caregiver_id,
                        sent_at=scheduled + timedelta(hours=2)
                    ))

    db.flush()
    logger.info(f"Created {created} dose logs")
    return created


def seed_demo_data(db, days: int = 14) -> Profile:
    """Seed everything into an open session and commit"""
    patient, caregiver = seed_profiles(db)

    if not db.query(Medication).filter(Medication.patient_id == patient.id).first():
        medications = seed_medications(db, patient.id)
        seed_dose_history(db, medications, caregiver.id, days=days)

    db.commit()
    seed_health_content(db)
    return patient


def seed_all(clear_existing: bool = False, days: int = 14):
    """Run all seed operations"""

    print("\n" + "="*60)
    print("Database Seeding")
    print("="*60)

    if clear_existing:
        logger.info("Clearing existing data...")
        reset_db()
    else:
        create_tables()

    db = SessionLocal()

    try:
        patient = seed_demo_data(db, days=days)

        # Print summary
        print("\n" + "="*60)
        print("Seeding Complete!")
        print("="*60)
        print(f"\nDatabase Statistics:")
        print(f"  Profiles: {db.query(Profile).count()}")
        print(f"  Medications: {db.query(Medication).count()}")
        print(f"  Schedules: {db.query(Schedule).count()}")
        print(f"  Dose Logs: {db.query(DoseLog).count()}")
        print(f"  Alerts: {db.query(Alert).count()}")

        total = db.query(DoseLog).count()
        taken = db.query(DoseLog).filter(DoseLog.status == DoseStatus.TAKEN).count()
        print(f"\nDemo Patient Compliance: {compliance_percent(taken, total)}%")

        print(f"\nDemo Patient ID: {patient.id} (send as X-User-Id)")
        print(f"Demo Patient Email: {patient.email}")

    except Exception as e:
        db.rollback()
        logger.error(f"Error during seeding: {e}")
        raise
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(
        description="Seed the database with demo data"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing data before seeding"
    )
    parser.add_argument(
        "--days",
        type=int,
        default=14,
        help="Days of dose history to generate"
    )

    args = parser.parse_args()

    seed_all(clear_existing=args.clear, days=args.days)


if __name__ == "__main__":
    main()
