"""
Profile Service
Business logic for patient and caregiver accounts
"""

import logging
from typing import Optional
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from sqlalchemy.orm import Session

from database import get_db_context
import models
from models import UserRole
from exceptions import ConflictError, NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


def validate_timezone(name: str) -> str:
    """Return the name if it is a known IANA zone, else raise ValueError"""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e
    return name


def wall_clock_now(timezone_name: Optional[str], at: Optional[datetime] = None) -> datetime:
    """
    Current wall-clock time in the given zone, as a naive datetime.

    Schedule times and dose-log timestamps are naive values read in the
    patient's declared zone; this is the matching "now".
    """
    instant = at or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    zone = ZoneInfo(timezone_name or "UTC")
    return instant.astimezone(zone).replace(tzinfo=None)


class ProfileService:
    """
    Service for account profiles
    """

    @wrap_transient_errors
    async def create_profile(
        self,
        email: str,
        full_name: str,
        role: UserRole,
        timezone_name: str = "UTC",
        db: Optional[Session] = None
    ) -> models.Profile:
        """Create a profile; emails are unique"""
        def _create(session: Session) -> models.Profile:
            existing = session.query(models.Profile).filter(
                models.Profile.email == email.lower()
            ).first()
            if existing:
                raise ConflictError(f"A profile with email {email} already exists")

            profile = models.Profile(
                email=email.lower(),
                full_name=full_name,
                role=role,
                timezone=validate_timezone(timezone_name)
            )
            session.add(profile)
            session.commit()
            session.refresh(profile)

            logger.info(f"Created {role.value} profile {profile.id}")
            return profile

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    @wrap_transient_errors
    async def get_profile(
        self,
        profile_id: int,
        db: Optional[Session] = None
    ) -> Optional[models.Profile]:
        """Get profile by ID"""
        def _get(session: Session) -> Optional[models.Profile]:
            return session.query(models.Profile).filter(
                models.Profile.id == profile_id
            ).first()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def update_profile(
        self,
        profile_id: int,
        full_name: Optional[str] = None,
        timezone_name: Optional[str] = None,
        db: Optional[Session] = None
    ) -> models.Profile:
        """Update own display name or timezone"""
        def _update(session: Session) -> models.Profile:
            profile = session.query(models.Profile).filter(
                models.Profile.id == profile_id
            ).first()
            if not profile:
                raise NotFoundError(f"Profile {profile_id} not found")

            if full_name is not None:
                profile.full_name = full_name
            if timezone_name is not None:
                profile.timezone = validate_timezone(timezone_name)

            session.commit()
            session.refresh(profile)
            return profile

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)


# Singleton instance
profile_service = ProfileService()
