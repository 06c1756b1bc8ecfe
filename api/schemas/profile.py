"""
Profile Schemas
Pydantic models for account profiles
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, EmailStr

from models import UserRole


class ProfileCreate(BaseModel):
    """Schema for registering a profile"""
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.PATIENT
    timezone: str = Field(default="UTC", max_length=50, description="IANA zone, e.g. Europe/Berlin")


class ProfileUpdate(BaseModel):
    """Schema for updating one's own profile"""
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    timezone: Optional[str] = Field(None, max_length=50)


class ProfileResponse(BaseModel):
    """Schema for profile response"""
    id: int
    email: str
    full_name: str
    role: UserRole
    timezone: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileSummary(BaseModel):
    """Minimal profile embedded in other responses"""
    id: int
    full_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
