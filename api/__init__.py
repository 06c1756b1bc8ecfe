"""
API Module
FastAPI routers for the MediTrack application
"""

from api.profiles import router as profiles_router
from api.doses import router as doses_router
from api.medications import router as medications_router
from api.schedules import router as schedules_router
from api.caregivers import router as caregivers_router
from api.education import router as education_router

from api.deps import (
    get_db,
    get_current_user,
    require_patient,
    require_caregiver,
    services,
)


__all__ = [
    # Routers
    "profiles_router",
    "doses_router",
    "medications_router",
    "schedules_router",
    "caregivers_router",
    "education_router",
    # Dependencies
    "get_db",
    "get_current_user",
    "require_patient",
    "require_caregiver",
    "services",
]


def include_routers(app):
    """
    Include all API routers in the FastAPI app

    Usage:
        from api import include_routers
        include_routers(app)
    """
    app.include_router(profiles_router, prefix="/api/v1")
    app.include_router(doses_router, prefix="/api/v1")
    app.include_router(medications_router, prefix="/api/v1")
    app.include_router(schedules_router, prefix="/api/v1")
    app.include_router(caregivers_router, prefix="/api/v1")
    app.include_router(education_router, prefix="/api/v1")
