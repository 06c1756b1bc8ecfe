"""
API Dependencies
Common dependencies for FastAPI endpoints
"""

from typing import Optional
from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.orm import Session

from database import get_db
from services import profile_service
import models


async def get_current_user_id(
    x_user_id: Optional[int] = Header(None, alias="X-User-Id")
) -> int:
    """
    Identity of the caller, set by the fronting auth layer
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> models.Profile:
    """
    Profile of the authenticated caller
    """
    profile = await profile_service.get_profile(user_id, db=db)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown user {user_id}",
        )
    return profile


async def require_patient(
    user: models.Profile = Depends(get_current_user)
) -> models.Profile:
    """Caller must have the patient role"""
    if not user.is_patient:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Patient account required",
        )
    return user


async def require_caregiver(
    user: models.Profile = Depends(get_current_user)
) -> models.Profile:
    """Caller must have the caregiver role"""
    if not user.is_caregiver:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Caregiver account required",
        )
    return user


class ServiceDependency:
    """
    Dependency injection for services
    """

    @staticmethod
    def get_profile_service():
        from services.profile_service import profile_service
        return profile_service

    @staticmethod
    def get_medication_service():
        from services.medication_service import medication_service
        return medication_service

    @staticmethod
    def get_schedule_service():
        from services.schedule_service import schedule_service
        return schedule_service

    @staticmethod
    def get_dose_service():
        from services.dose_service import dose_service
        return dose_service

    @staticmethod
    def get_adherence_service():
        from services.adherence_service import adherence_service
        return adherence_service

    @staticmethod
    def get_caregiver_service():
        from services.caregiver_service import caregiver_service
        return caregiver_service

    @staticmethod
    def get_alert_service():
        from services.alert_service import alert_service
        return alert_service

    @staticmethod
    def get_education_service():
        from services.education_service import education_service
        return education_service


# Service dependency instances
services = ServiceDependency()
