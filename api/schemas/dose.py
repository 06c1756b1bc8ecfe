"""
Dose Schemas
Pydantic models for upcoming doses, dose logs and compliance
"""

from typing import Optional, List
from datetime import datetime, date as dt_date
from pydantic import BaseModel, Field, ConfigDict

from models import DoseStatus


# ==================== REQUEST SCHEMAS ====================

class DoseTaken(BaseModel):
    """Schema for confirming a dose"""
    taken_at: Optional[datetime] = Field(None, description="Defaults to the current time in the patient's zone")
    notes: Optional[str] = Field(None, max_length=1000)


class DoseSkipped(BaseModel):
    """Schema for skipping a dose"""
    notes: Optional[str] = Field(None, max_length=1000)


# ==================== RESPONSE SCHEMAS ====================

class DoseLogResponse(BaseModel):
    """Schema for dose log response"""
    id: int
    schedule_id: int
    scheduled_time: datetime
    taken_at: Optional[datetime] = None
    status: DoseStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UpcomingDose(BaseModel):
    """One occurrence of a schedule today"""
    schedule_id: int
    medication_id: int
    medication_name: str
    dosage: str
    instructions: str = ""
    scheduled_time: datetime
    dose_log_id: Optional[int] = None
    status: Optional[DoseStatus] = None
    taken_at: Optional[datetime] = None


class UpcomingDoses(BaseModel):
    """Nearest dose occurrences plus later ones not yet materialized"""
    patient_id: int
    now: datetime
    doses: List[UpcomingDose]
    later: List[UpcomingDose]
    created: int = 0


class DailyCompliance(BaseModel):
    """Per-status counts and compliance for one day"""
    patient_id: int
    date: dt_date
    total_doses: int
    taken: int
    missed: int
    skipped: int
    pending: int
    compliance: int = Field(..., ge=0, le=100)


class WatchResponse(BaseModel):
    """State of the periodic upcoming-dose refresh for a patient"""
    key: str
    running: bool
    started: bool = False
