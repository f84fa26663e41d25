"""
Database Models
SQLAlchemy ORM models for DoseTrack
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Index, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum

from database import Base
from config import TableNames


# ==================== ENUMS ====================

class RecurrenceType(str, PyEnum):
    """How a schedule repeats"""
    DAILY = "daily"
    WEEKLY = "weekly"
    INTERVAL = "interval"


class IntakeStatus(str, PyEnum):
    """Status a user can log for a dose"""
    TAKEN = "taken"
    SKIPPED = "skipped"


class OccurrenceStatus(str, PyEnum):
    """Derived status of an expected dose"""
    TAKEN = "taken"
    SKIPPED = "skipped"
    MISSED = "missed"
    PENDING = "pending"


# ==================== MODELS ====================

class User(Base):
    """User profile; the timezone drives local-day expansion"""
    __tablename__ = TableNames.USERS

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    timezone = Column(String(64), default="UTC")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    medications = relationship("Medication", back_populates="user", cascade="all, delete-orphan")
    intakes = relationship("Intake", back_populates="user", cascade="all, delete-orphan")


class Medication(Base):
    """A medication owned by a user"""
    __tablename__ = TableNames.MEDICATIONS

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    name = Column(String(255), nullable=False)
    dosage = Column(String(100))  # e.g., "500mg", "1 pill"
    notes = Column(Text)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="medications")
    schedules = relationship("Schedule", back_populates="medication", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_medications_user_active", "user_id", "is_active"),
    )


class Schedule(Base):
    """Recurring schedule definition; occurrences are derived, never stored"""
    __tablename__ = TableNames.SCHEDULES

    id = Column(Integer, primary_key=True, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)

    recurrence_type = Column(String(20), nullable=False)  # daily, weekly, interval
    times = Column(JSON, default=list)       # ["08:00", "20:00"]
    weekdays = Column(JSON, nullable=True)   # ["mon", "wed"]
    interval_hours = Column(Integer, nullable=True)

    # Deactivated, never hard-deleted
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    medication = relationship("Medication", back_populates="schedules")
    intakes = relationship("Intake", back_populates="schedule", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_schedules_medication_active", "medication_id", "is_active"),
    )


class Intake(Base):
    """Immutable log of a dose action"""
    __tablename__ = TableNames.INTAKES

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    status = Column(String(20), nullable=False)  # taken, skipped
    taken_at = Column(DateTime, nullable=False)  # naive UTC

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="intakes")
    schedule = relationship("Schedule", back_populates="intakes")
    medication = relationship("Medication")

    __table_args__ = (
        Index("ix_intakes_user_taken_at", "user_id", "taken_at"),
        Index("ix_intakes_schedule_taken_at", "schedule_id", "taken_at"),
    )
