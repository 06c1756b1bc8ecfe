"""
Scripts for MediTrack
Utility scripts for seeding development data
"""

from .seed_data import seed_all, seed_demo_data, create_tables

__all__ = [
    "seed_all",
    "seed_demo_data",
    "create_tables"
]
