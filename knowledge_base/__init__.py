"""
Knowledge Base Module
Static health-education content shipped with MediTrack
"""

from .health_content import (
    ArticleSeed,
    TopicSeed,
    HEALTH_TOPICS,
    seed_health_content,
)


__all__ = [
    "ArticleSeed",
    "TopicSeed",
    "HEALTH_TOPICS",
    "seed_health_content",
]
