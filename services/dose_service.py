"""
Dose Service
Persistence for dose logs and the patient-facing dose workflow
"""

import logging
from typing import Any, Callable, List, Optional, Tuple
from datetime import datetime
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError

from database import get_db_context
import models
from models import DoseStatus
from services import access_policy
from services.profile_service import wall_clock_now
from tools.dose_materializer import (
    DoseMaterializer,
    MaterializationResult,
    truncate_to_minute,
    validate_transition,
)
from exceptions import InvalidTransitionError, NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


class DoseService:
    """
    Service for dose logs.

    Implements the lookup and conflict-tolerant insert the materializer
    relies on, and the patient's taken/skipped transitions.
    """

    def __init__(self):
        self.materializer = DoseMaterializer(store=self)

    # ==================== PERSISTENCE ====================

    @wrap_transient_errors
    async def list_active_medications_with_schedules(
        self,
        patient_id: int,
        db: Optional[Session] = None
    ) -> List[models.Medication]:
        """Active medications of a patient with their schedules loaded"""
        def _get(session: Session) -> List[models.Medication]:
            return session.query(models.Medication).options(
                selectinload(models.Medication.schedules)
            ).filter(
                and_(
                    models.Medication.patient_id == patient_id,
                    models.Medication.active == True
                )
            ).all()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def find_dose_log(
        self,
        schedule_id: int,
        window_start: datetime,
        window_end: datetime,
        db: Optional[Session] = None
    ) -> Optional[models.DoseLog]:
        """Dose log of a schedule with scheduled_time in [window_start, window_end)"""
        def _find(session: Session) -> Optional[models.DoseLog]:
            return session.query(models.DoseLog).filter(
                and_(
                    models.DoseLog.schedule_id == schedule_id,
                    models.DoseLog.scheduled_time >= window_start,
                    models.DoseLog.scheduled_time < window_end
                )
            ).order_by(models.DoseLog.id).first()

        if db:
            return _find(db)

        with get_db_context() as session:
            return _find(session)

    @wrap_transient_errors
    async def insert_dose_log(
        self,
        schedule_id: int,
        scheduled_time: datetime,
        db: Optional[Session] = None
    ) -> Tuple[models.DoseLog, bool]:
        """
        Insert a pending dose log; returns the row and whether this call
        created it.

        A concurrent pass may have inserted the same occurrence first; the
        unique constraint rejects the second insert and the existing row is
        returned with created=False.
        """
        occurrence_time = truncate_to_minute(scheduled_time)

        def _insert(session: Session) -> Tuple[models.DoseLog, bool]:
            log = models.DoseLog(
                schedule_id=schedule_id,
                scheduled_time=occurrence_time,
                status=DoseStatus.PENDING,
                taken_at=None
            )
            session.add(log)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                existing = session.query(models.DoseLog).filter(
                    and_(
                        models.DoseLog.schedule_id == schedule_id,
                        models.DoseLog.scheduled_time == occurrence_time
                    )
                ).first()
                if existing is None:
                    raise
                logger.debug(f"Dose for schedule {schedule_id} at {occurrence_time} already materialized")
                return existing, False

            session.refresh(log)
            return log, True

        if db:
            return _insert(db)

        with get_db_context() as session:
            return _insert(session)

    async def create_dose_log(
        self,
        schedule_id: int,
        scheduled_time: datetime,
        db: Optional[Session] = None
    ) -> models.DoseLog:
        """Pending dose log for the occurrence, created or already present"""
        log, _ = await self.insert_dose_log(schedule_id, scheduled_time, db=db)
        return log

    @wrap_transient_errors
    async def update_dose_log_status(
        self,
        dose_log_id: int,
        status: DoseStatus,
        actor_id: Optional[int] = None,
        taken_at: Optional[datetime] = None,
        notes: Optional[str] = None,
        system: bool = False,
        after_transition: Optional[Callable[[Session, models.DoseLog], Any]] = None,
        db: Optional[Session] = None
    ) -> models.DoseLog:
        """
        Move a pending dose log to a terminal status

        Args:
            dose_log_id: Dose log ID
            status: Target status
            actor_id: Caller; must own the medication unless system is set
            taken_at: Time of intake, defaults to the owner's current wall clock;
                an aware value is converted to that wall clock
            notes: Optional patient notes
            system: Background transition (pending -> missed)
            after_transition: Called with the session and row before commit,
                so follow-up rows land in the same transaction
            db: Database session

        Raises:
            AuthorizationError: actor does not own the dose log
            InvalidTransitionError: dose is not pending, or target not allowed
        """
        status = DoseStatus(status)

        def _update(session: Session) -> models.DoseLog:
            if system:
                owner_id = access_policy.dose_log_owner_id(session, dose_log_id)
                if owner_id is None:
                    raise NotFoundError(f"Dose log {dose_log_id} not found")
            else:
                owner_id = access_policy.ensure_dose_log_writable(session, actor_id, dose_log_id)

            log = session.query(models.DoseLog).filter(
                models.DoseLog.id == dose_log_id
            ).first()

            validate_transition(log.status, status, system=system)

            values = {"status": status}
            if status == DoseStatus.TAKEN:
                if taken_at is None or taken_at.tzinfo is not None:
                    # Aware values are converted to the owner's wall clock
                    owner = session.get(models.Profile, owner_id)
                    values["taken_at"] = wall_clock_now(owner.timezone, taken_at)
                else:
                    values["taken_at"] = taken_at
            if notes is not None:
                values["notes"] = notes

            # Compare-and-set so a concurrent transition is never overwritten
            updated = session.query(models.DoseLog).filter(
                and_(
                    models.DoseLog.id == dose_log_id,
                    models.DoseLog.status == DoseStatus.PENDING
                )
            ).update(values, synchronize_session=False)

            if not updated:
                session.rollback()
                raise InvalidTransitionError(
                    f"Dose log {dose_log_id} changed concurrently; it is no longer pending"
                )

            if after_transition:
                after_transition(session, log)

            session.commit()
            session.refresh(log)

            logger.info(f"Dose log {dose_log_id} marked {status.value}")
            return log

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    # ==================== WORKFLOW ====================

    async def _upcoming(
        self,
        session: Session,
        user_id: int,
        patient_id: int,
        now: Optional[datetime]
    ) -> MaterializationResult:
        access_policy.ensure_can_read(session, user_id, patient_id)

        patient = session.get(models.Profile, patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")

        now = now or wall_clock_now(patient.timezone)
        medications = await self.list_active_medications_with_schedules(patient_id, db=session)

        # Only the owner's own view materializes rows; caregivers just look
        return await self.materializer.materialize(
            now,
            medications,
            create_missing=access_policy.can_write_patient_data(user_id, patient_id),
            db=session
        )

    @wrap_transient_errors
    async def get_upcoming_doses(
        self,
        user_id: int,
        patient_id: int,
        now: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> MaterializationResult:
        """
        Today's dose occurrences for a patient, materializing imminent ones
        when the caller is the patient

        Args:
            user_id: Caller
            patient_id: Patient whose doses are requested
            now: Wall-clock moment in the patient's zone, defaults to the current time
            db: Database session
        """
        if db:
            return await self._upcoming(db, user_id, patient_id, now)

        with get_db_context() as session:
            return await self._upcoming(session, user_id, patient_id, now)

    async def mark_taken(
        self,
        user_id: int,
        dose_log_id: int,
        taken_at: Optional[datetime] = None,
        notes: Optional[str] = None,
        db: Optional[Session] = None
    ) -> models.DoseLog:
        """Patient confirms a pending dose"""
        return await self.update_dose_log_status(
            dose_log_id, DoseStatus.TAKEN,
            actor_id=user_id, taken_at=taken_at, notes=notes, db=db
        )

    async def mark_skipped(
        self,
        user_id: int,
        dose_log_id: int,
        notes: Optional[str] = None,
        db: Optional[Session] = None
    ) -> models.DoseLog:
        """Patient deliberately skips a pending dose"""
        return await self.update_dose_log_status(
            dose_log_id, DoseStatus.SKIPPED,
            actor_id=user_id, notes=notes, db=db
        )


# Singleton instance
dose_service = DoseService()
