"""
Medications API Router
Endpoints for medication management
"""

from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

import models
from api.deps import get_db, get_current_user, require_patient, services
from api.doses import notify_patient_data_changed
from api.schemas.medication import (
    MedicationCreate,
    MedicationUpdate,
    MedicationResponse,
    MedicationList,
    WeeklyCounts,
)


router = APIRouter(prefix="/medications", tags=["medications"])


@router.post("/", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
async def create_medication(
    medication_data: MedicationCreate,
    user: models.Profile = Depends(require_patient),
    db: Session = Depends(get_db)
):
    """
    Add a medication with its first schedule

    - **name**: Medication name
    - **dosage**: Dosage (e.g., "500mg")
    - **time**: Time of day, HH:MM
    - **days_of_week**: 0=Sunday..6=Saturday, omit for every day
    """
    medication_service = services.get_medication_service()

    medication = await medication_service.add_medication(
        patient_id=user.id,
        name=medication_data.name,
        dosage=medication_data.dosage,
        scheduled_time=medication_data.time,
        days_of_week=medication_data.days_of_week,
        instructions=medication_data.instructions or "",
        db=db
    )
    notify_patient_data_changed(user.id)
    return medication


@router.get("/", response_model=MedicationList)
async def get_medications(
    patient_id: Optional[int] = Query(None, description="Defaults to the caller"),
    active_only: bool = Query(True, description="Only return active medications"),
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Medications of a patient, newest first, with their schedules
    """
    medication_service = services.get_medication_service()

    medications = await medication_service.get_patient_medications(
        user.id,
        patient_id or user.id,
        active_only=active_only,
        db=db
    )

    return MedicationList(
        medications=medications,
        total=len(medications),
        active_count=sum(1 for m in medications if m.active)
    )


@router.get("/weekly-counts", response_model=WeeklyCounts)
async def get_weekly_counts(
    patient_id: Optional[int] = Query(None, description="Defaults to the caller"),
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active doses per weekday, 0=Sunday..6=Saturday"""
    schedule_service = services.get_schedule_service()
    target = patient_id or user.id

    counts = await schedule_service.get_weekly_counts(user.id, target, db=db)
    return WeeklyCounts(patient_id=target, counts=counts)


@router.get("/{medication_id}", response_model=MedicationResponse)
async def get_medication(
    medication_id: int,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get medication details"""
    medication_service = services.get_medication_service()
    return await medication_service.get_medication(user.id, medication_id, db=db)


@router.patch("/{medication_id}", response_model=MedicationResponse)
async def update_medication(
    medication_id: int,
    update_data: MedicationUpdate,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update medication information"""
    medication_service = services.get_medication_service()

    medication = await medication_service.update_medication(
        user.id,
        medication_id,
        update_data.model_dump(exclude_unset=True),
        db=db
    )
    notify_patient_data_changed(user.id)
    return medication


@router.delete("/{medication_id}", response_model=MedicationResponse)
async def deactivate_medication(
    medication_id: int,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Deactivate a medication; its dose history is kept
    """
    medication_service = services.get_medication_service()

    medication = await medication_service.deactivate_medication(user.id, medication_id, db=db)
    notify_patient_data_changed(user.id)
    return medication
