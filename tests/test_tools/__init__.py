"""
Test Tools Package
Tests for the tools module (dose materializer, missed-dose monitor, refresh scheduler)
"""

__all__ = [
    "test_dose_materializer",
    "test_missed_dose_monitor",
    "test_refresh_scheduler",
]
