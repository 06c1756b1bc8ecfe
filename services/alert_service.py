"""
Alert Service
Caregiver alerts raised for missed doses
"""

import logging
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_

from config import dose_config
from database import get_db_context
import models
from models import AlertType
from services import access_policy
from exceptions import NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


def create_missed_dose_alerts(session: Session, dose_log: models.DoseLog) -> List[models.Alert]:
    """
    Add one missed-dose alert per caregiver of the dose's patient who has
    notifications enabled. The caller commits.
    """
    patient_id = access_policy.dose_log_owner_id(session, dose_log.id)

    connections = session.query(models.CaregiverConnection).filter(
        and_(
            models.CaregiverConnection.patient_id == patient_id,
            models.CaregiverConnection.notify_missed_doses == True
        )
    ).all()

    alerts = []
    for connection in connections:
        alert = models.Alert(
            dose_log_id=dose_log.id,
            caregiver_id=connection.caregiver_id,
            type=AlertType.MISSED_DOSE,
            sent_at=datetime.utcnow()
        )
        session.add(alert)
        alerts.append(alert)

    if alerts:
        logger.info(
            f"Raised {len(alerts)} missed-dose alert(s) for dose log {dose_log.id} "
            f"of patient {patient_id}"
        )
    return alerts


class AlertService:
    """
    Service for caregiver alerts
    """

    @wrap_transient_errors
    async def get_unread_alerts(
        self,
        caregiver_id: int,
        limit: int = dose_config.ALERT_LIST_LIMIT,
        db: Optional[Session] = None
    ) -> List[models.Alert]:
        """Unread alerts addressed to the caregiver, newest first"""
        def _get(session: Session) -> List[models.Alert]:
            return session.query(models.Alert).options(
                joinedload(models.Alert.dose_log)
                .joinedload(models.DoseLog.schedule)
                .joinedload(models.Schedule.medication)
                .joinedload(models.Medication.patient)
            ).filter(
                and_(
                    models.Alert.caregiver_id == caregiver_id,
                    models.Alert.read_at.is_(None)
                )
            ).order_by(
                models.Alert.sent_at.desc(),
                models.Alert.id.desc()
            ).limit(limit).all()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def mark_read(
        self,
        user_id: int,
        alert_id: int,
        db: Optional[Session] = None
    ) -> models.Alert:
        """Acknowledge an alert; only its addressee may"""
        def _mark(session: Session) -> models.Alert:
            alert = session.query(models.Alert).filter(
                models.Alert.id == alert_id
            ).first()
            if not alert:
                raise NotFoundError(f"Alert {alert_id} not found")
            access_policy.ensure_alert_recipient(alert, user_id)

            if alert.read_at is None:
                alert.read_at = datetime.utcnow()
                session.commit()
                session.refresh(alert)
            return alert

        if db:
            return _mark(db)

        with get_db_context() as session:
            return _mark(session)


# Singleton instance
alert_service = AlertService()
