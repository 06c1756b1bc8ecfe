"""
Doses API Router
Endpoints for upcoming doses, dose confirmation and daily compliance
"""

import logging
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import models
from config import dose_config
from api.deps import get_db, get_current_user, require_patient, services
from api.schemas.dose import (
    DoseTaken,
    DoseSkipped,
    DoseLogResponse,
    UpcomingDose,
    UpcomingDoses,
    DailyCompliance,
    WatchResponse,
)
from tools.refresh_scheduler import refresh_scheduler
from exceptions import AuthorizationError, NotFoundError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doses", tags=["doses"])


def upcoming_key(patient_id: int) -> str:
    return f"upcoming:{patient_id}"


def notify_patient_data_changed(patient_id: int) -> None:
    """Wake the patient's refresh task, if one is running"""
    refresh_scheduler.trigger(upcoming_key(patient_id))


def _refresh_job(patient_id: int):
    async def _job():
        dose_service = services.get_dose_service()
        await dose_service.get_upcoming_doses(patient_id, patient_id)
    return _job


@router.get("/upcoming", response_model=UpcomingDoses)
async def get_upcoming_doses(
    patient_id: Optional[int] = Query(None, description="Defaults to the caller"),
    limit: int = Query(dose_config.UPCOMING_DOSE_LIMIT, ge=1, le=50),
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Today's nearest doses

    Doses due within the next hour, or already past, are logged as pending
    when the patient asks. Later ones are listed under **later** until
    they come due.
    """
    dose_service = services.get_dose_service()
    target = patient_id or user.id

    result = await dose_service.get_upcoming_doses(user.id, target, db=db)

    return UpcomingDoses(
        patient_id=target,
        now=result.now,
        doses=[UpcomingDose(**o.to_dict()) for o in result.nearest(limit)],
        later=[UpcomingDose(**o.to_dict()) for o in result.deferred],
        created=result.created
    )


@router.post("/{dose_log_id}/taken", response_model=DoseLogResponse)
async def mark_dose_taken(
    dose_log_id: int,
    dose_data: Optional[DoseTaken] = None,
    user: models.Profile = Depends(require_patient),
    db: Session = Depends(get_db)
):
    """
    Confirm a pending dose

    Returns 409 when the dose was already taken, skipped or missed.
    """
    dose_service = services.get_dose_service()
    dose_data = dose_data or DoseTaken()

    log = await dose_service.mark_taken(
        user.id,
        dose_log_id,
        taken_at=dose_data.taken_at,
        notes=dose_data.notes,
        db=db
    )
    notify_patient_data_changed(user.id)
    return log


@router.post("/{dose_log_id}/skipped", response_model=DoseLogResponse)
async def mark_dose_skipped(
    dose_log_id: int,
    dose_data: Optional[DoseSkipped] = None,
    user: models.Profile = Depends(require_patient),
    db: Session = Depends(get_db)
):
    """Skip a pending dose deliberately"""
    dose_service = services.get_dose_service()
    dose_data = dose_data or DoseSkipped()

    log = await dose_service.mark_skipped(
        user.id,
        dose_log_id,
        notes=dose_data.notes,
        db=db
    )
    notify_patient_data_changed(user.id)
    return log


@router.get("/today", response_model=List[DoseLogResponse])
async def get_dose_logs(
    patient_id: Optional[int] = Query(None, description="Defaults to the caller"),
    day: Optional[date] = Query(None, description="Defaults to the patient's today"),
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Dose logs of one day ordered by scheduled time"""
    adherence_service = services.get_adherence_service()
    return await adherence_service.get_dose_logs_for_day(
        user.id, patient_id or user.id, day=day, db=db
    )


@router.get("/compliance", response_model=DailyCompliance)
async def get_compliance(
    patient_id: Optional[int] = Query(None, description="Defaults to the caller"),
    day: Optional[date] = Query(None, description="Defaults to the patient's today"),
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Share of the day's logged doses that were taken, rounded to a whole
    percent; 100 when nothing was logged
    """
    adherence_service = services.get_adherence_service()
    return await adherence_service.get_daily_compliance(
        user.id, patient_id or user.id, day=day, db=db
    )


@router.post("/watch", response_model=WatchResponse)
async def start_watch(
    user: models.Profile = Depends(require_patient)
):
    """
    Keep the caller's upcoming doses materialized in the background,
    refreshing every minute and after each dose write. The task ends by
    itself once the profile is gone.
    """
    key = upcoming_key(user.id)
    started = refresh_scheduler.start(
        key,
        _refresh_job(user.id),
        dose_config.REFRESH_INTERVAL_SECONDS,
        stop_on=(NotFoundError, AuthorizationError)
    )
    return WatchResponse(key=key, running=refresh_scheduler.is_running(key), started=started)


@router.delete("/watch", response_model=WatchResponse)
async def stop_watch(
    user: models.Profile = Depends(require_patient)
):
    """Stop the background refresh, e.g. on logout"""
    key = upcoming_key(user.id)
    await refresh_scheduler.cancel(key)
    return WatchResponse(key=key, running=False)
