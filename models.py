"""
Database Models
SQLAlchemy ORM models for MediTrack
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Time, Enum, Index, UniqueConstraint, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum

from database import Base


# ==================== ENUMS ====================

class UserRole(str, PyEnum):
    """Account role chosen at sign-up"""
    PATIENT = "patient"
    CAREGIVER = "caregiver"


class DoseStatus(str, PyEnum):
    """Lifecycle state of a materialized dose"""
    PENDING = "pending"
    TAKEN = "taken"
    MISSED = "missed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self != DoseStatus.PENDING


class AlertType(str, PyEnum):
    """Types of caregiver alerts"""
    MISSED_DOSE = "missed_dose"
    REMINDER = "reminder"


class TopicCategory(str, PyEnum):
    """Health education categories"""
    HYPERTENSION = "hypertension"
    DIABETES = "diabetes"
    HEART_HEALTH = "heart_health"
    GENERAL = "general"
    EXERCISE = "exercise"
    DIET = "diet"
    MEDICATION_SAFETY = "medication_safety"


# ==================== MODELS ====================

class Profile(Base):
    """Patient or caregiver account"""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False)

    # IANA zone the patient's schedule times are read in
    timezone = Column(String(50), default="UTC", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    medications = relationship("Medication", back_populates="patient", cascade="all, delete-orphan")

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT

    @property
    def is_caregiver(self) -> bool:
        return self.role == UserRole.CAREGIVER


class Medication(Base):
    """Medication owned by one patient; retired via the active flag"""
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    dosage = Column(String(100), nullable=False)  # e.g., "10mg"
    instructions = Column(Text, default="")

    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    patient = relationship("Profile", back_populates="medications")
    schedules = relationship("Schedule", back_populates="medication", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_medications_patient_active", "patient_id", "active"),
    )


class Schedule(Base):
    """Recurring weekly dose time for a medication"""
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id", ondelete="CASCADE"), nullable=False, index=True)

    time = Column(Time, nullable=False)
    days_of_week = Column(JSON, nullable=False, default=lambda: [0, 1, 2, 3, 4, 5, 6])  # 0=Sunday

    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    medication = relationship("Medication", back_populates="schedules")
    dose_logs = relationship("DoseLog", back_populates="schedule", cascade="all, delete-orphan")


class DoseLog(Base):
    """Outcome of one materialized dose occurrence"""
    __tablename__ = "dose_logs"

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)

    # Patient wall-clock, truncated to the minute
    scheduled_time = Column(DateTime, nullable=False)
    taken_at = Column(DateTime)

    status = Column(Enum(DoseStatus), default=DoseStatus.PENDING, nullable=False)
    notes = Column(Text, default="")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    schedule = relationship("Schedule", back_populates="dose_logs")
    alerts = relationship("Alert", back_populates="dose_log", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("schedule_id", "scheduled_time", name="uq_dose_log_occurrence"),
        Index("ix_dose_logs_status", "status"),
        Index("ix_dose_logs_scheduled_time", "scheduled_time"),
    )


class CaregiverConnection(Base):
    """Grants a caregiver read access to one patient's data"""
    __tablename__ = "caregiver_connections"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    caregiver_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    relationship_label = Column("relationship", String(100), nullable=False)
    notify_missed_doses = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    patient = relationship("Profile", foreign_keys=[patient_id])
    caregiver = relationship("Profile", foreign_keys=[caregiver_id])

    __table_args__ = (
        UniqueConstraint("patient_id", "caregiver_id", name="uq_caregiver_connection"),
    )


class Alert(Base):
    """Notice addressed to a caregiver about a patient's dose"""
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    dose_log_id = Column(Integer, ForeignKey("dose_logs.id", ondelete="CASCADE"), nullable=False)
    caregiver_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(Enum(AlertType), nullable=False, default=AlertType.MISSED_DOSE)
    sent_at = Column(DateTime, default=datetime.utcnow)
    read_at = Column(DateTime, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    dose_log = relationship("DoseLog", back_populates="alerts")
    caregiver = relationship("Profile")

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


class HealthTopic(Base):
    """Health education topic"""
    __tablename__ = "health_topics"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    category = Column(Enum(TopicCategory), nullable=False, index=True)
    description = Column(Text, default="")
    icon = Column(String(50), default="book")
    order_index = Column(Integer, default=0, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    articles = relationship("HealthArticle", back_populates="topic", cascade="all, delete-orphan")


class HealthArticle(Base):
    """Health education article"""
    __tablename__ = "health_articles"

    id = Column(Integer, primary_key=True, index=True)
    topic_id = Column(Integer, ForeignKey("health_topics.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    summary = Column(Text, default="")
    reading_time_minutes = Column(Integer, default=5)

    published_at = Column(DateTime, default=datetime.utcnow, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    topic = relationship("HealthTopic", back_populates="articles")


class ArticleProgress(Base):
    """Per-user read and bookmark state for an article"""
    __tablename__ = "article_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    article_id = Column(Integer, ForeignKey("health_articles.id", ondelete="CASCADE"), nullable=False, index=True)

    read_at = Column(DateTime)
    bookmarked = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    article = relationship("HealthArticle")

    __table_args__ = (
        UniqueConstraint("user_id", "article_id", name="uq_article_progress"),
    )
