"""
Medication Service
Business logic for medication management
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import time
from sqlalchemy.orm import Session, selectinload

from database import get_db_context
import models
from services import access_policy
from services.schedule_service import normalize_days
from exceptions import NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


class MedicationService:
    """
    Service for medication-related operations
    """

    @wrap_transient_errors
    async def add_medication(
        self,
        patient_id: int,
        name: str,
        dosage: str,
        scheduled_time: time,
        days_of_week: Optional[List[int]] = None,
        instructions: str = "",
        db: Optional[Session] = None
    ) -> models.Medication:
        """
        Add a new medication for a patient together with its first schedule

        Args:
            patient_id: Owning patient (the caller)
            name: Medication name
            dosage: Dosage (e.g., "10mg")
            scheduled_time: Time of day for the dose
            days_of_week: Weekday indices 0=Sunday..6=Saturday, None for every day
            instructions: Free-text instructions
            db: Database session

        Returns:
            Created Medication with its schedule loaded
        """
        def _add(session: Session) -> models.Medication:
            patient = session.query(models.Profile).filter(
                models.Profile.id == patient_id
            ).first()

            if not patient:
                raise NotFoundError(f"Patient {patient_id} not found")

            medication = models.Medication(
                patient_id=patient_id,
                name=name,
                dosage=dosage,
                instructions=instructions or "",
                active=True
            )
            medication.schedules.append(models.Schedule(
                time=scheduled_time,
                days_of_week=normalize_days(days_of_week),
                active=True
            ))

            session.add(medication)
            session.commit()
            session.refresh(medication)

            logger.info(f"Added medication {name} for patient {patient_id}")
            return medication

        if db:
            return _add(db)

        with get_db_context() as session:
            return _add(session)

    @wrap_transient_errors
    async def get_medication(
        self,
        user_id: int,
        medication_id: int,
        db: Optional[Session] = None
    ) -> models.Medication:
        """Get a medication visible to the user"""
        def _get(session: Session) -> models.Medication:
            medication = session.query(models.Medication).options(
                selectinload(models.Medication.schedules)
            ).filter(models.Medication.id == medication_id).first()

            if not medication:
                raise NotFoundError(f"Medication {medication_id} not found")

            access_policy.ensure_can_read(session, user_id, medication.patient_id)
            return medication

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def get_patient_medications(
        self,
        user_id: int,
        patient_id: int,
        active_only: bool = True,
        db: Optional[Session] = None
    ) -> List[models.Medication]:
        """Medications of a patient with their schedules, newest first"""
        def _get(session: Session) -> List[models.Medication]:
            access_policy.ensure_can_read(session, user_id, patient_id)

            query = session.query(models.Medication).options(
                selectinload(models.Medication.schedules)
            ).filter(models.Medication.patient_id == patient_id)

            if active_only:
                query = query.filter(models.Medication.active == True)

            return query.order_by(
                models.Medication.created_at.desc(),
                models.Medication.id.desc()
            ).all()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def update_medication(
        self,
        user_id: int,
        medication_id: int,
        updates: Dict[str, Any],
        db: Optional[Session] = None
    ) -> models.Medication:
        """Update medication fields; only the owning patient may do this"""
        def _update(session: Session) -> models.Medication:
            access_policy.ensure_medication_writable(session, user_id, medication_id)

            medication = session.query(models.Medication).filter(
                models.Medication.id == medication_id
            ).first()

            allowed_fields = {'name', 'dosage', 'instructions', 'active'}

            for field, value in updates.items():
                if field in allowed_fields and value is not None:
                    setattr(medication, field, value)

            session.commit()
            session.refresh(medication)

            logger.info(f"Updated medication {medication_id} for patient {medication.patient_id}")
            return medication

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def deactivate_medication(
        self,
        user_id: int,
        medication_id: int,
        db: Optional[Session] = None
    ) -> models.Medication:
        """Soft-disable; dose logs keep referencing the medication"""
        return await self.update_medication(user_id, medication_id, {'active': False}, db)


# Singleton instance
medication_service = MedicationService()
