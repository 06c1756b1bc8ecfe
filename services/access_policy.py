"""
Access Policy
Row-level authorization predicates for patient data, alerts and
education progress
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, exists

import models
from exceptions import AuthorizationError, NotFoundError


logger = logging.getLogger(__name__)


# ==================== PREDICATES ====================

def is_connected_caregiver(db: Session, caregiver_id: int, patient_id: int) -> bool:
    """True when a connection links the caregiver to the patient"""
    return db.query(
        exists().where(
            and_(
                models.CaregiverConnection.patient_id == patient_id,
                models.CaregiverConnection.caregiver_id == caregiver_id
            )
        )
    ).scalar()


def can_read_patient_data(db: Session, user_id: int, patient_id: int) -> bool:
    """Owner, or a caregiver connected to the owner"""
    return user_id == patient_id or is_connected_caregiver(db, user_id, patient_id)


def can_write_patient_data(user_id: int, patient_id: int) -> bool:
    """Only the owning patient writes medications, schedules and dose logs"""
    return user_id == patient_id


# ==================== ROW OWNERSHIP ====================

def medication_owner_id(db: Session, medication_id: int) -> Optional[int]:
    return db.query(models.Medication.patient_id).filter(
        models.Medication.id == medication_id
    ).scalar()


def schedule_owner_id(db: Session, schedule_id: int) -> Optional[int]:
    return db.query(models.Medication.patient_id).join(
        models.Schedule, models.Schedule.medication_id == models.Medication.id
    ).filter(models.Schedule.id == schedule_id).scalar()


def dose_log_owner_id(db: Session, dose_log_id: int) -> Optional[int]:
    return db.query(models.Medication.patient_id).join(
        models.Schedule, models.Schedule.medication_id == models.Medication.id
    ).join(
        models.DoseLog, models.DoseLog.schedule_id == models.Schedule.id
    ).filter(models.DoseLog.id == dose_log_id).scalar()


# ==================== ENFORCEMENT ====================

def ensure_can_read(db: Session, user_id: int, patient_id: int) -> None:
    if not can_read_patient_data(db, user_id, patient_id):
        raise AuthorizationError(
            f"User {user_id} may not read data of patient {patient_id}"
        )


def ensure_can_write(user_id: int, patient_id: int, what: str) -> None:
    if not can_write_patient_data(user_id, patient_id):
        logger.error(f"Rejected write to {what} by user {user_id}; owner is {patient_id}")
        raise AuthorizationError(f"User {user_id} may not modify {what}")


def ensure_medication_writable(db: Session, user_id: int, medication_id: int) -> int:
    """Return the owner id after checking the user owns the medication"""
    owner_id = medication_owner_id(db, medication_id)
    if owner_id is None:
        raise NotFoundError(f"Medication {medication_id} not found")
    ensure_can_write(user_id, owner_id, f"medication {medication_id}")
    return owner_id


def ensure_schedule_writable(db: Session, user_id: int, schedule_id: int) -> int:
    owner_id = schedule_owner_id(db, schedule_id)
    if owner_id is None:
        raise NotFoundError(f"Schedule {schedule_id} not found")
    ensure_can_write(user_id, owner_id, f"schedule {schedule_id}")
    return owner_id


def ensure_dose_log_writable(db: Session, user_id: int, dose_log_id: int) -> int:
    owner_id = dose_log_owner_id(db, dose_log_id)
    if owner_id is None:
        raise NotFoundError(f"Dose log {dose_log_id} not found")
    ensure_can_write(user_id, owner_id, f"dose log {dose_log_id}")
    return owner_id


def ensure_alert_recipient(alert: models.Alert, user_id: int) -> None:
    """Alerts are visible to, and acknowledged by, their addressee only"""
    if alert.caregiver_id != user_id:
        logger.error(f"User {user_id} tried to access alert {alert.id} addressed to {alert.caregiver_id}")
        raise AuthorizationError(f"Alert {alert.id} is not addressed to user {user_id}")


def ensure_connection_owner(connection: models.CaregiverConnection, user_id: int) -> None:
    """Only the patient side changes or removes a connection"""
    if connection.patient_id != user_id:
        logger.error(f"User {user_id} tried to modify connection {connection.id}")
        raise AuthorizationError(f"Only the patient may modify connection {connection.id}")
