"""
Schedules API Router
Endpoints for the dose times of a medication
"""

from typing import List
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

import models
from api.deps import get_db, get_current_user, services
from api.doses import notify_patient_data_changed
from api.schemas.medication import ScheduleCreate, ScheduleUpdate, ScheduleResponse


router = APIRouter(tags=["schedules"])


@router.post(
    "/medications/{medication_id}/schedules",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_schedule(
    medication_id: int,
    schedule_data: ScheduleCreate,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add a dose time to a medication

    - **time**: Time of day, HH:MM
    - **days_of_week**: 0=Sunday..6=Saturday, omit for every day
    """
    schedule_service = services.get_schedule_service()

    schedule = await schedule_service.create_schedule(
        user.id,
        medication_id,
        scheduled_time=schedule_data.time,
        days_of_week=schedule_data.days_of_week,
        db=db
    )
    notify_patient_data_changed(user.id)
    return schedule


@router.get("/medications/{medication_id}/schedules", response_model=List[ScheduleResponse])
async def get_schedules(
    medication_id: int,
    active_only: bool = Query(True),
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Schedules of a medication ordered by time of day"""
    schedule_service = services.get_schedule_service()
    return await schedule_service.get_medication_schedules(
        user.id, medication_id, active_only=active_only, db=db
    )


@router.patch("/schedules/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: int,
    update_data: ScheduleUpdate,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change the time, days or active flag of a schedule"""
    schedule_service = services.get_schedule_service()

    schedule = await schedule_service.update_schedule(
        user.id,
        schedule_id,
        update_data.model_dump(exclude_unset=True),
        db=db
    )
    notify_patient_data_changed(user.id)
    return schedule


@router.delete("/schedules/{schedule_id}", response_model=ScheduleResponse)
async def deactivate_schedule(
    schedule_id: int,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Deactivate a schedule"""
    schedule_service = services.get_schedule_service()

    schedule = await schedule_service.deactivate_schedule(user.id, schedule_id, db=db)
    notify_patient_data_changed(user.id)
    return schedule
