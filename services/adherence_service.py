"""
Adherence Service
Daily dose history and compliance for a patient
"""

import logging
from typing import Dict, List, Optional, Any, Tuple
from datetime import datetime, date, time, timedelta
from collections import Counter
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_

from database import get_db_context
import models
from models import DoseStatus
from services import access_policy
from services.profile_service import wall_clock_now
from tools.dose_materializer import compliance_percent
from exceptions import NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[start of day, start of next day) as naive wall-clock datetimes"""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def summarize_logs(logs: List[models.DoseLog]) -> Dict[str, int]:
    """Counts by status plus the compliance percentage"""
    counts = Counter(DoseStatus(log.status) for log in logs)
    total = len(logs)
    return {
        "total_doses": total,
        "taken": counts[DoseStatus.TAKEN],
        "missed": counts[DoseStatus.MISSED],
        "skipped": counts[DoseStatus.SKIPPED],
        "pending": counts[DoseStatus.PENDING],
        "compliance": compliance_percent(counts[DoseStatus.TAKEN], total),
    }


class AdherenceService:
    """
    Service for adherence tracking
    """

    def _logs_for_day(self, session: Session, patient_id: int, day: date) -> List[models.DoseLog]:
        start, end = day_bounds(day)
        return session.query(models.DoseLog).join(
            models.Schedule, models.DoseLog.schedule_id == models.Schedule.id
        ).join(
            models.Medication, models.Schedule.medication_id == models.Medication.id
        ).options(
            joinedload(models.DoseLog.schedule).joinedload(models.Schedule.medication)
        ).filter(
            and_(
                models.Medication.patient_id == patient_id,
                models.DoseLog.scheduled_time >= start,
                models.DoseLog.scheduled_time < end
            )
        ).order_by(models.DoseLog.scheduled_time).all()

    def _patient_today(self, session: Session, patient_id: int) -> date:
        patient = session.get(models.Profile, patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return wall_clock_now(patient.timezone).date()

    @wrap_transient_errors
    async def get_dose_logs_for_day(
        self,
        user_id: int,
        patient_id: int,
        day: Optional[date] = None,
        db: Optional[Session] = None
    ) -> List[models.DoseLog]:
        """Dose logs of a patient scheduled on a day (default: patient's today)"""
        def _get(session: Session) -> List[models.DoseLog]:
            access_policy.ensure_can_read(session, user_id, patient_id)
            target = day or self._patient_today(session, patient_id)
            return self._logs_for_day(session, patient_id, target)

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def get_daily_compliance(
        self,
        user_id: int,
        patient_id: int,
        day: Optional[date] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Compliance for one day

        Returns:
            Dict with date, per-status counts and compliance percentage
        """
        def _get(session: Session) -> Dict[str, Any]:
            access_policy.ensure_can_read(session, user_id, patient_id)
            target = day or self._patient_today(session, patient_id)
            summary = summarize_logs(self._logs_for_day(session, patient_id, target))
            summary["date"] = target
            summary["patient_id"] = patient_id
            return summary

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)


# Singleton instance
adherence_service = AdherenceService()
