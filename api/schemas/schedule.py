"""
Schedule Schemas
Pydantic models for schedule requests and responses

Field rules that depend on the recurrence type are enforced by the
schedule service so every problem is reported in one response.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


# ==================== REQUEST SCHEMAS ====================

class ScheduleCreate(BaseModel):
    """Schema for creating a schedule"""
    user_id: int
    medication_id: int
    recurrence_type: str = Field(..., description="daily, weekly or interval")
    times: Optional[List[str]] = Field(None, description="HH:MM local times")
    weekdays: Optional[List[str]] = Field(None, description="mon..sun, weekly only")
    interval_hours: Optional[int] = Field(None, description="Hours between doses, interval only")
    is_active: bool = True


class ScheduleUpdate(BaseModel):
    """Schema for a partial schedule update; unset fields keep their stored value"""
    recurrence_type: Optional[str] = None
    times: Optional[List[str]] = None
    weekdays: Optional[List[str]] = None
    interval_hours: Optional[int] = None
    is_active: Optional[bool] = None


# ==================== RESPONSE SCHEMAS ====================

class ScheduleResponse(BaseModel):
    """Schema for schedule response"""
    id: int
    medication_id: int
    recurrence_type: str
    times: Optional[List[str]] = None
    weekdays: Optional[List[str]] = None
    interval_hours: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
