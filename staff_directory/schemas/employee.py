"""
Employee schema models for validation.
"""
import math
import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, validator

EMAIL_MAX_LENGTH = 254

# Separators are mandatory between word runs so a non-matching input fails in linear time
EMAIL_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$")
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")


class EmployeeBase(BaseModel):
    """Base employee schema with the mutable fields."""
    name: str
    email: str = Field(..., max_length=EMAIL_MAX_LENGTH)
    phone: str
    designation: str
    salary: float


class EmployeeCreate(EmployeeBase):
    """
    Schema for creating employees.
    Also used for updates, which always carry every mutable field.
    """

    @validator("phone", pre=True)
    def coerce_phone(cls, v):
        # Forms may send the phone as a JSON number
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @validator("salary", pre=True)
    def require_numeric_salary(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("Salary must be a number")
        return v

    @validator("name")
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @validator("email")
    def validate_email(cls, v):
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email")
        return v

    @validator("phone")
    def validate_phone(cls, v):
        v = v.strip()
        if not PHONE_PATTERN.match(v):
            raise ValueError("Phone must be a valid 10-digit number")
        return v

    @validator("designation")
    def validate_designation(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Designation is required")
        return v

    @validator("salary")
    def validate_salary(cls, v):
        if not math.isfinite(v):
            raise ValueError("Salary must be a number")
        if v < 0:
            raise ValueError("Salary cannot be negative")
        return v

    model_config = {
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "phone": "1234567890",
                "designation": "Engineer",
                "salary": 1000
            }
        }
    }


class CreatorInfo(BaseModel):
    """Display identity of the user who created a record."""
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = {
        "populate_by_name": True
    }


class EmployeeResponse(EmployeeBase):
    """Schema for employee responses."""
    id: str = Field(..., alias="_id")
    created_by: Optional[CreatorInfo] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "populate_by_name": True
    }


class Pagination(BaseModel):
    total: int
    page: int
    pages: int
    limit: int


class EmployeeEnvelope(BaseModel):
    """Single employee response envelope."""
    success: bool = True
    message: Optional[str] = None
    data: EmployeeResponse


class EmployeeListEnvelope(BaseModel):
    """Paginated employee list response envelope."""
    success: bool = True
    data: List[EmployeeResponse]
    pagination: Pagination


class DeleteEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
