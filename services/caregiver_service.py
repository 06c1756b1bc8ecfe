"""
Caregiver Service
Patient-caregiver connections and the caregiver's patient overview
"""

import logging
from typing import Dict, List, Optional, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_

from database import get_db_context
import models
from models import UserRole
from services import access_policy
from services.adherence_service import adherence_service, summarize_logs
from services.profile_service import wall_clock_now
from exceptions import ConflictError, NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


class CaregiverService:
    """
    Service for caregiver connections
    """

    @wrap_transient_errors
    async def add_caregiver(
        self,
        patient_id: int,
        caregiver_email: str,
        relationship: str,
        notify_missed_doses: bool = True,
        db: Optional[Session] = None
    ) -> models.CaregiverConnection:
        """
        Connect a caregiver, found by email, to the calling patient

        Raises:
            NotFoundError: no caregiver account with that email
            ConflictError: already connected, or connecting to oneself
        """
        def _add(session: Session) -> models.CaregiverConnection:
            caregiver = session.query(models.Profile).filter(
                models.Profile.email == caregiver_email.lower()
            ).first()

            if not caregiver or caregiver.role != UserRole.CAREGIVER:
                raise NotFoundError(f"No caregiver account found for {caregiver_email}")
            if caregiver.id == patient_id:
                raise ConflictError("A patient cannot be their own caregiver")

            existing = session.query(models.CaregiverConnection).filter(
                and_(
                    models.CaregiverConnection.patient_id == patient_id,
                    models.CaregiverConnection.caregiver_id == caregiver.id
                )
            ).first()
            if existing:
                raise ConflictError(f"{caregiver_email} is already connected")

            connection = models.CaregiverConnection(
                patient_id=patient_id,
                caregiver_id=caregiver.id,
                relationship_label=relationship,
                notify_missed_doses=notify_missed_doses
            )
            session.add(connection)
            session.commit()
            session.refresh(connection)

            logger.info(f"Connected caregiver {caregiver.id} to patient {patient_id}")
            return connection

        if db:
            return _add(db)

        with get_db_context() as session:
            return _add(session)

    @wrap_transient_errors
    async def list_caregivers(
        self,
        patient_id: int,
        db: Optional[Session] = None
    ) -> List[models.CaregiverConnection]:
        """The patient's connections with caregiver profiles, newest first"""
        def _get(session: Session) -> List[models.CaregiverConnection]:
            return session.query(models.CaregiverConnection).options(
                joinedload(models.CaregiverConnection.caregiver)
            ).filter(
                models.CaregiverConnection.patient_id == patient_id
            ).order_by(
                models.CaregiverConnection.created_at.desc(),
                models.CaregiverConnection.id.desc()
            ).all()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    def _get_connection(self, session: Session, connection_id: int) -> models.CaregiverConnection:
        connection = session.query(models.CaregiverConnection).filter(
            models.CaregiverConnection.id == connection_id
        ).first()
        if not connection:
            raise NotFoundError(f"Connection {connection_id} not found")
        return connection

    @wrap_transient_errors
    async def set_notifications(
        self,
        user_id: int,
        connection_id: int,
        notify_missed_doses: bool,
        db: Optional[Session] = None
    ) -> models.CaregiverConnection:
        """Toggle missed-dose alerts for a connection (patient only)"""
        def _update(session: Session) -> models.CaregiverConnection:
            connection = self._get_connection(session, connection_id)
            access_policy.ensure_connection_owner(connection, user_id)

            connection.notify_missed_doses = notify_missed_doses
            session.commit()
            session.refresh(connection)
            return connection

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    @wrap_transient_errors
    async def remove_caregiver(
        self,
        user_id: int,
        connection_id: int,
        db: Optional[Session] = None
    ) -> None:
        """Delete a connection (patient only)"""
        def _remove(session: Session) -> None:
            connection = self._get_connection(session, connection_id)
            access_policy.ensure_connection_owner(connection, user_id)

            session.delete(connection)
            session.commit()
            logger.info(f"Removed connection {connection_id} for patient {user_id}")

        if db:
            return _remove(db)

        with get_db_context() as session:
            return _remove(session)

    @wrap_transient_errors
    async def get_caregiver_overview(
        self,
        caregiver_id: int,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """
        One entry per connected patient: profile, relationship, active
        medications, today's missed doses and today's compliance
        """
        def _get(session: Session) -> List[Dict[str, Any]]:
            connections = session.query(models.CaregiverConnection).options(
                joinedload(models.CaregiverConnection.patient)
            ).filter(
                models.CaregiverConnection.caregiver_id == caregiver_id
            ).order_by(models.CaregiverConnection.created_at).all()

            overview = []
            for connection in connections:
                patient = connection.patient
                access_policy.ensure_can_read(session, caregiver_id, patient.id)

                medications = session.query(models.Medication).filter(
                    and_(
                        models.Medication.patient_id == patient.id,
                        models.Medication.active == True
                    )
                ).order_by(models.Medication.name).all()

                today = wall_clock_now(patient.timezone).date()
                summary = summarize_logs(
                    adherence_service._logs_for_day(session, patient.id, today)
                )

                overview.append({
                    "patient": patient,
                    "relationship": connection.relationship_label,
                    "medications": medications,
                    "missed_doses": summary["missed"],
                    "today_compliance": summary["compliance"],
                })
            return overview

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)


# Singleton instance
caregiver_service = CaregiverService()
