"""
MediTrack Test Suite
====================

This package contains all tests for the MediTrack medication tracking backend.

Test Structure:
- test_api/: API endpoint tests for FastAPI routes
- test_services/: Service-layer tests against an in-memory database
- test_tools/: Dose materializer, missed-dose monitor and refresh scheduler
- test_scripts/: Demo data seeding
- conftest.py: Shared pytest fixtures

Running Tests:
    # Run all tests
    pytest

    # Run specific test module
    pytest tests/test_tools/

    # Run only marked tests
    pytest -m "unit"
    pytest -m "api"
"""

from typing import Dict

# Test configuration
TEST_DATABASE_URL = "sqlite:///:memory:"


def auth_headers(profile) -> Dict[str, str]:
    """Request headers identifying the given profile"""
    return {"X-User-Id": str(profile.id)}


__all__ = [
    "TEST_DATABASE_URL",
    "auth_headers",
]
