"""
User schema models for validation.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, validator
from datetime import datetime

from staff_directory.core.permissions import Role


class UserCreate(BaseModel):
    """Schema for self-registration. New users always get the staff role."""
    name: str
    email: EmailStr
    password: str

    @validator("name")
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @validator("password")
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    model_config = {
        "extra": "ignore"
    }


class UserResponse(BaseModel):
    """Schema for user responses."""
    id: str = Field(..., alias="_id")
    name: str
    email: str
    role: Role
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = {
        "populate_by_name": True
    }


class PrincipalResponse(BaseModel):
    """The authenticated caller as seen by the API."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Role
