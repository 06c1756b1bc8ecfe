"""
Tools Module
Dose materialization and background jobs for MediTrack
"""

from tools.dose_materializer import (
    DoseMaterializer,
    DoseOccurrence,
    MaterializationResult,
    compute_occurrences,
    compliance_percent,
    weekday_index,
)
from tools.refresh_scheduler import RefreshScheduler, refresh_scheduler


__all__ = [
    "DoseMaterializer",
    "DoseOccurrence",
    "MaterializationResult",
    "compute_occurrences",
    "compliance_percent",
    "weekday_index",
    "RefreshScheduler",
    "refresh_scheduler",
]
