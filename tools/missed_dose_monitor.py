"""
Missed Dose Monitor
Background job that marks stale pending doses as missed and alerts
connected caregivers
"""

import logging
from typing import List, Optional
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from config import settings
from database import get_db_context
import models
from models import DoseStatus
from services.alert_service import create_missed_dose_alerts
from services.dose_service import dose_service
from services.profile_service import wall_clock_now
from exceptions import InvalidTransitionError


logger = logging.getLogger(__name__)


class MissedDoseMonitor:
    """
    Scans pending dose logs whose scheduled time lies more than the
    threshold in the past on the patient's own wall clock
    """

    def __init__(self, threshold_minutes: int = settings.MISSED_DOSE_THRESHOLD_MINUTES):
        self.threshold = timedelta(minutes=threshold_minutes)

    def is_overdue(self, scheduled_time: datetime, patient_now: datetime) -> bool:
        return patient_now - scheduled_time > self.threshold

    def _pending_with_timezones(self, session: Session):
        return session.query(models.DoseLog, models.Profile.timezone).join(
            models.Schedule, models.DoseLog.schedule_id == models.Schedule.id
        ).join(
            models.Medication, models.Schedule.medication_id == models.Medication.id
        ).join(
            models.Profile, models.Medication.patient_id == models.Profile.id
        ).filter(
            models.DoseLog.status == DoseStatus.PENDING
        ).order_by(models.DoseLog.scheduled_time).all()

    async def scan(
        self,
        at: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> List[models.DoseLog]:
        """
        Run one scan

        Args:
            at: Instant to evaluate (aware, or naive UTC); defaults to now
            db: Database session

        Returns:
            Dose logs moved to missed in this scan
        """
        async def _scan(session: Session) -> List[models.DoseLog]:
            missed = []
            for dose_log, timezone_name in self._pending_with_timezones(session):
                patient_now = wall_clock_now(timezone_name, at)
                if not self.is_overdue(dose_log.scheduled_time, patient_now):
                    continue

                try:
                    updated = await dose_service.update_dose_log_status(
                        dose_log.id,
                        DoseStatus.MISSED,
                        system=True,
                        after_transition=create_missed_dose_alerts,
                        db=session
                    )
                except InvalidTransitionError:
                    # Patient recorded the dose while the scan was running
                    logger.debug(f"Dose log {dose_log.id} resolved before it could be marked missed")
                    continue
                missed.append(updated)

            if missed:
                logger.info(f"Marked {len(missed)} dose(s) as missed")
            return missed

        if db:
            return await _scan(db)

        with get_db_context() as session:
            return await _scan(session)

    async def run(self) -> None:
        """Job entry point for the refresh scheduler"""
        await self.scan()


# Singleton instance
missed_dose_monitor = MissedDoseMonitor()
