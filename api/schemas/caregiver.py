"""
Caregiver Schemas
Pydantic models for caregiver connections, overview and alerts
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, EmailStr

from models import AlertType
from api.schemas.profile import ProfileSummary
from api.schemas.medication import MedicationSummary


# ==================== CONNECTIONS ====================

class CaregiverAdd(BaseModel):
    """Schema for connecting a caregiver by email"""
    caregiver_email: EmailStr
    relationship: str = Field(..., min_length=1, max_length=100)
    notify_missed_doses: bool = True


class NotificationUpdate(BaseModel):
    """Schema for toggling missed-dose alerts"""
    notify_missed_doses: bool


class ConnectionResponse(BaseModel):
    """Connection as seen by the patient"""
    id: int
    patient_id: int
    caregiver_id: int
    relationship: str = Field(validation_alias="relationship_label")
    notify_missed_doses: bool
    created_at: Optional[datetime] = None
    caregiver: Optional[ProfileSummary] = None

    model_config = ConfigDict(from_attributes=True)


class PatientOverview(BaseModel):
    """One connected patient on the caregiver dashboard"""
    patient: ProfileSummary
    relationship: str
    medications: List[MedicationSummary]
    missed_doses: int
    today_compliance: int


# ==================== ALERTS ====================

class AlertResponse(BaseModel):
    """Unread alert with the dose and patient it refers to"""
    id: int
    type: AlertType
    dose_log_id: int
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    patient_name: Optional[str] = None
    medication_name: Optional[str] = None
    scheduled_time: Optional[datetime] = None

    @classmethod
    def from_alert(cls, alert) -> "AlertResponse":
        dose_log = alert.dose_log
        medication = dose_log.schedule.medication if dose_log else None
        return cls(
            id=alert.id,
            type=alert.type,
            dose_log_id=alert.dose_log_id,
            sent_at=alert.sent_at,
            read_at=alert.read_at,
            patient_name=medication.patient.full_name if medication else None,
            medication_name=medication.name if medication else None,
            scheduled_time=dose_log.scheduled_time if dose_log else None,
        )
