"""
Medication Schemas
Pydantic models for medication and schedule API requests and responses
"""

from typing import Annotated, Optional, List, Dict
from datetime import datetime, time as dt_time
from pydantic import AfterValidator, BaseModel, Field, ConfigDict, field_validator, field_serializer


def _wall_clock_time(value: dt_time) -> dt_time:
    """Schedule times are read on the patient's own clock and carry no offset"""
    if value.tzinfo is not None:
        raise ValueError("time must be a local time of day without a UTC offset")
    return value


WallClockTime = Annotated[dt_time, AfterValidator(_wall_clock_time)]


class DaysOfWeekMixin(BaseModel):
    """Weekday indices, 0=Sunday..6=Saturday"""
    days_of_week: Optional[List[int]] = Field(None, description="0=Sunday..6=Saturday; omit for every day")

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        for day in v:
            if day < 0 or day > 6:
                raise ValueError("days_of_week entries must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(v))


# ==================== SCHEDULE SCHEMAS ====================

class ScheduleCreate(DaysOfWeekMixin):
    """Schema for adding a schedule to a medication"""
    time: WallClockTime = Field(..., description="Time of day, HH:MM")


class ScheduleUpdate(DaysOfWeekMixin):
    """Schema for updating a schedule"""
    time: Optional[WallClockTime] = None
    active: Optional[bool] = None


class ScheduleResponse(BaseModel):
    """Schema for schedule response"""
    id: int
    medication_id: int
    time: dt_time
    days_of_week: List[int]
    active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("time")
    def serialize_time(self, value: dt_time) -> str:
        return value.strftime("%H:%M")


# ==================== MEDICATION SCHEMAS ====================

class MedicationBase(BaseModel):
    """Base medication schema"""
    name: str = Field(..., min_length=1, max_length=255)
    dosage: str = Field(..., min_length=1, max_length=100)
    instructions: Optional[str] = ""


class MedicationCreate(MedicationBase, DaysOfWeekMixin):
    """Schema for adding a medication with its first schedule"""
    time: WallClockTime = Field(..., description="Time of day for the first schedule, HH:MM")


class MedicationUpdate(BaseModel):
    """Schema for updating medication"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    instructions: Optional[str] = None
    active: Optional[bool] = None


class MedicationResponse(MedicationBase):
    """Schema for medication response"""
    id: int
    patient_id: int
    active: bool
    created_at: Optional[datetime] = None
    schedules: List[ScheduleResponse] = []

    model_config = ConfigDict(from_attributes=True)


class MedicationSummary(BaseModel):
    """Medication without schedules"""
    id: int
    name: str
    dosage: str
    active: bool

    model_config = ConfigDict(from_attributes=True)


class MedicationList(BaseModel):
    """Schema for medication list"""
    medications: List[MedicationResponse]
    total: int
    active_count: int


class WeeklyCounts(BaseModel):
    """Active doses per weekday, keyed 0=Sunday..6=Saturday"""
    patient_id: int
    counts: Dict[int, int]
