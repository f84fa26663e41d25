"""
Intake Schemas
Pydantic models for dose logging
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator

from models import IntakeStatus
from tools.time_utils import ensure_utc


class IntakeCreate(BaseModel):
    """Schema for logging a dose action"""
    user_id: int
    schedule_id: int
    status: IntakeStatus
    taken_at: Optional[datetime] = None


class IntakeResponse(BaseModel):
    """Schema for intake response"""
    id: int
    user_id: int
    schedule_id: int
    medication_id: int
    status: IntakeStatus
    taken_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("taken_at", "created_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)
