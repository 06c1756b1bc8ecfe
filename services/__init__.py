"""
Services Module
Business logic layer for the MediTrack application
"""

from services.profile_service import ProfileService, profile_service
from services.schedule_service import ScheduleService, schedule_service
from services.medication_service import MedicationService, medication_service
from services.dose_service import DoseService, dose_service
from services.adherence_service import AdherenceService, adherence_service
from services.caregiver_service import CaregiverService, caregiver_service
from services.alert_service import AlertService, alert_service
from services.education_service import EducationService, education_service


__all__ = [
    # Service classes
    "ProfileService",
    "ScheduleService",
    "MedicationService",
    "DoseService",
    "AdherenceService",
    "CaregiverService",
    "AlertService",
    "EducationService",
    # Singleton instances
    "profile_service",
    "schedule_service",
    "medication_service",
    "dose_service",
    "adherence_service",
    "caregiver_service",
    "alert_service",
    "education_service",
]
