"""
Schedule Service
Business logic for medication schedule management
"""

import logging
from typing import Dict, List, Optional, Any, Iterable
from datetime import time
from sqlalchemy.orm import Session
from sqlalchemy import and_

from config import dose_config
from database import get_db_context
import models
from services import access_policy
from exceptions import NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


def normalize_days(days: Optional[Iterable[int]]) -> List[int]:
    """
    Sorted, de-duplicated weekday indices (0=Sunday..6=Saturday).
    None means every day; an empty list is kept and yields no occurrences.
    """
    if days is None:
        return list(dose_config.DEFAULT_DAYS_OF_WEEK)

    normalized = set()
    for day in days:
        day = int(day)
        if not 0 <= day <= 6:
            raise ValueError(f"Invalid weekday index {day}; expected 0 (Sunday) to 6 (Saturday)")
        normalized.add(day)
    return sorted(normalized)


class ScheduleService:
    """
    Service for medication schedule management
    """

    @wrap_transient_errors
    async def create_schedule(
        self,
        user_id: int,
        medication_id: int,
        scheduled_time: time,
        days_of_week: Optional[List[int]] = None,
        db: Optional[Session] = None
    ) -> models.Schedule:
        """
        Create a medication schedule entry

        Args:
            user_id: Caller; must own the medication
            medication_id: Medication ID
            scheduled_time: Time of day for dose
            days_of_week: Days of week (0=Sunday, 6=Saturday), None for daily
            db: Database session

        Returns:
            Created Schedule object
        """
        def _create(session: Session) -> models.Schedule:
            access_policy.ensure_medication_writable(session, user_id, medication_id)

            schedule = models.Schedule(
                medication_id=medication_id,
                time=scheduled_time,
                days_of_week=normalize_days(days_of_week),
                active=True
            )

            session.add(schedule)
            session.commit()
            session.refresh(schedule)

            logger.info(
                f"Created schedule for medication {medication_id} "
                f"at {scheduled_time} on days {schedule.days_of_week}"
            )
            return schedule

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    @wrap_transient_errors
    async def get_medication_schedules(
        self,
        user_id: int,
        medication_id: int,
        active_only: bool = True,
        db: Optional[Session] = None
    ) -> List[models.Schedule]:
        """Get schedules for a medication the user may read"""
        def _get(session: Session) -> List[models.Schedule]:
            owner_id = access_policy.medication_owner_id(session, medication_id)
            if owner_id is None:
                raise NotFoundError(f"Medication {medication_id} not found")
            access_policy.ensure_can_read(session, user_id, owner_id)

            query = session.query(models.Schedule).filter(
                models.Schedule.medication_id == medication_id
            )
            if active_only:
                query = query.filter(models.Schedule.active == True)

            return query.order_by(models.Schedule.time).all()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def update_schedule(
        self,
        user_id: int,
        schedule_id: int,
        updates: Dict[str, Any],
        db: Optional[Session] = None
    ) -> models.Schedule:
        """Update a schedule"""
        def _update(session: Session) -> models.Schedule:
            access_policy.ensure_schedule_writable(session, user_id, schedule_id)

            schedule = session.query(models.Schedule).filter(
                models.Schedule.id == schedule_id
            ).first()

            if 'time' in updates and updates['time'] is not None:
                schedule.time = updates['time']
            if 'days_of_week' in updates and updates['days_of_week'] is not None:
                schedule.days_of_week = normalize_days(updates['days_of_week'])
            if 'active' in updates and updates['active'] is not None:
                schedule.active = updates['active']

            session.commit()
            session.refresh(schedule)

            return schedule

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def deactivate_schedule(
        self,
        user_id: int,
        schedule_id: int,
        db: Optional[Session] = None
    ) -> models.Schedule:
        """Deactivate a schedule"""
        return await self.update_schedule(user_id, schedule_id, {'active': False}, db)

    @wrap_transient_errors
    async def get_weekly_counts(
        self,
        user_id: int,
        patient_id: int,
        db: Optional[Session] = None
    ) -> Dict[int, int]:
        """
        Number of active doses per weekday (0=Sunday..6=Saturday)
        across the patient's active medications
        """
        def _get(session: Session) -> Dict[int, int]:
            access_policy.ensure_can_read(session, user_id, patient_id)

            schedules = session.query(models.Schedule).join(
                models.Medication
            ).filter(
                and_(
                    models.Medication.patient_id == patient_id,
                    models.Medication.active == True,
                    models.Schedule.active == True
                )
            ).all()

            counts = {day: 0 for day in range(7)}
            for schedule in schedules:
                for day in schedule.days_of_week or []:
                    counts[int(day)] += 1
            return counts

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)


# Singleton instance
schedule_service = ScheduleService()
