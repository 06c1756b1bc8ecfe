"""
Caregivers API Router
Endpoints for caregiver connections, the caregiver overview and alerts
"""

from typing import List
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

import models
from config import dose_config
from api.deps import get_db, require_patient, require_caregiver, services
from api.schemas.caregiver import (
    CaregiverAdd,
    NotificationUpdate,
    ConnectionResponse,
    PatientOverview,
    AlertResponse,
)


router = APIRouter(tags=["caregivers"])


# ==================== CONNECTIONS ====================

@router.post("/caregivers", response_model=ConnectionResponse, status_code=status.HTTP_201_CREATED)
async def add_caregiver(
    caregiver_data: CaregiverAdd,
    user: models.Profile = Depends(require_patient),
    db: Session = Depends(get_db)
):
    """
    Connect a caregiver account to the calling patient

    - **caregiver_email**: Email of an existing caregiver profile
    - **relationship**: e.g. "daughter"
    """
    caregiver_service = services.get_caregiver_service()
    return await caregiver_service.add_caregiver(
        patient_id=user.id,
        caregiver_email=caregiver_data.caregiver_email,
        relationship=caregiver_data.relationship,
        notify_missed_doses=caregiver_data.notify_missed_doses,
        db=db
    )


@router.get("/caregivers", response_model=List[ConnectionResponse])
async def list_caregivers(
    user: models.Profile = Depends(require_patient),
    db: Session = Depends(get_db)
):
    """The caller's caregivers, newest first"""
    caregiver_service = services.get_caregiver_service()
    return await caregiver_service.list_caregivers(user.id, db=db)


@router.patch("/caregivers/{connection_id}", response_model=ConnectionResponse)
async def update_notifications(
    connection_id: int,
    update_data: NotificationUpdate,
    user: models.Profile = Depends(require_patient),
    db: Session = Depends(get_db)
):
    """Turn missed-dose alerts on or off for one caregiver"""
    caregiver_service = services.get_caregiver_service()
    return await caregiver_service.set_notifications(
        user.id, connection_id, update_data.notify_missed_doses, db=db
    )


@router.delete("/caregivers/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_caregiver(
    connection_id: int,
    user: models.Profile = Depends(require_patient),
    db: Session = Depends(get_db)
):
    """Disconnect a caregiver"""
    caregiver_service = services.get_caregiver_service()
    await caregiver_service.remove_caregiver(user.id, connection_id, db=db)


# ==================== CAREGIVER VIEW ====================

@router.get("/caregivers/patients", response_model=List[PatientOverview])
async def get_overview(
    user: models.Profile = Depends(require_caregiver),
    db: Session = Depends(get_db)
):
    """
    Every connected patient with active medications, today's missed
    doses and today's compliance
    """
    caregiver_service = services.get_caregiver_service()
    return await caregiver_service.get_caregiver_overview(user.id, db=db)


@router.get("/alerts", response_model=List[AlertResponse])
async def get_unread_alerts(
    limit: int = Query(dose_config.ALERT_LIST_LIMIT, ge=1, le=100),
    user: models.Profile = Depends(require_caregiver),
    db: Session = Depends(get_db)
):
    """Unread alerts addressed to the caller, newest first"""
    alert_service = services.get_alert_service()
    alerts = await alert_service.get_unread_alerts(user.id, limit=limit, db=db)
    return [AlertResponse.from_alert(a) for a in alerts]


@router.post("/alerts/{alert_id}/read", response_model=AlertResponse)
async def mark_alert_read(
    alert_id: int,
    user: models.Profile = Depends(require_caregiver),
    db: Session = Depends(get_db)
):
    """Acknowledge an alert"""
    alert_service = services.get_alert_service()
    alert = await alert_service.mark_read(user.id, alert_id, db=db)
    return AlertResponse.from_alert(alert)
