"""
User Schemas
Pydantic models for user and profile requests and responses
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, EmailStr


# ==================== REQUEST SCHEMAS ====================

class UserCreate(BaseModel):
    """Schema for registering a user"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    timezone: Optional[str] = Field(None, max_length=64, description="IANA timezone name")


class ProfileUpdate(BaseModel):
    """Schema for updating a user profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    timezone: Optional[str] = Field(None, max_length=64, description="IANA timezone name")


# ==================== RESPONSE SCHEMAS ====================

class UserResponse(BaseModel):
    """Schema for user profile response"""
    id: int
    name: str
    email: str
    timezone: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
