"""
Configuration management for MediTrack
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "MediTrack"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: str = "development"

    # API
    API_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./meditrack.db"
    DATABASE_ECHO: bool = False
    DATABASE_TIMEOUT_SECONDS: int = 15

    # Background jobs
    MISSED_DOSE_MONITOR_ENABLED: bool = True
    MISSED_DOSE_SCAN_INTERVAL_SECONDS: int = 300
    MISSED_DOSE_THRESHOLD_MINUTES: int = 120

    # Content
    SEED_HEALTH_CONTENT: bool = True

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


class DoseConfig:
    """Dose materialization constants"""

    # A log row is created once the dose is this close (or past due)
    MATERIALIZE_WINDOW_MINUTES: int = 60

    # Lookup tolerance for an existing log: [t, t + window)
    DEDUP_WINDOW_SECONDS: int = 60

    # Nearest occurrences handed to the dashboard
    UPCOMING_DOSE_LIMIT: int = 5

    # Dashboard refresh cadence
    REFRESH_INTERVAL_SECONDS: int = 60

    # Unread alerts shown to a caregiver
    ALERT_LIST_LIMIT: int = 10

    DEFAULT_DAYS_OF_WEEK: list[int] = [0, 1, 2, 3, 4, 5, 6]


# Database table names
class TableNames:
    PROFILES = "profiles"
    MEDICATIONS = "medications"
    SCHEDULES = "schedules"
    DOSE_LOGS = "dose_logs"
    CAREGIVER_CONNECTIONS = "caregiver_connections"
    ALERTS = "alerts"
    HEALTH_TOPICS = "health_topics"
    HEALTH_ARTICLES = "health_articles"
    ARTICLE_PROGRESS = "article_progress"


settings = get_settings()
dose_config = DoseConfig()
