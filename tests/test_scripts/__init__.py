"""
Test Scripts Package
Tests for the development seeding script
"""

__all__ = [
    "test_seed_data",
]
