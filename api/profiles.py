"""
Profiles API Router
Endpoints for registering and maintaining account profiles
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

import models
from api.deps import get_db, get_current_user, services
from api.schemas.profile import ProfileCreate, ProfileUpdate, ProfileResponse


router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("/", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    profile_data: ProfileCreate,
    db: Session = Depends(get_db)
):
    """
    Register a patient or caregiver profile

    - **email**: Unique email address
    - **role**: patient or caregiver
    - **timezone**: IANA zone used to read schedule times
    """
    profile_service = services.get_profile_service()

    try:
        return await profile_service.create_profile(
            email=profile_data.email,
            full_name=profile_data.full_name,
            role=profile_data.role,
            timezone_name=profile_data.timezone,
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user: models.Profile = Depends(get_current_user)
):
    """Profile of the caller"""
    return user


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update display name or timezone"""
    profile_service = services.get_profile_service()

    try:
        return await profile_service.update_profile(
            user.id,
            full_name=profile_data.full_name,
            timezone_name=profile_data.timezone,
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
