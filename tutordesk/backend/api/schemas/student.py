import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from .common import CamelModel

EMAIL_PATTERN = re.compile(r"^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+$")


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please add a valid email")
    return value


class StudentCreateRequest(CamelModel):
    """Request model for registering a new student."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, description="Full name of the student.")
    email: str = Field(..., min_length=3, max_length=254, description="Unique, stored lowercase.")
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    joined_date: Optional[datetime] = Field(None, description="Defaults to the time of creation.")

    @field_validator("email")
    def normalize_email(cls, v):
        return _normalize_email(v)


class StudentUpdateRequest(CamelModel):
    """Partial update: only the fields that are sent are changed."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3, max_length=254)
    phone: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    joined_date: Optional[datetime] = None

    @field_validator("email")
    def normalize_email(cls, v):
        return _normalize_email(v)


class StudentResponse(CamelModel):
    id: UUID
    name: str
    email: str
    phone: str
    address: str
    joined_date: datetime
    created_at: datetime
    updated_at: datetime


class StudentRefResponse(CamelModel):
    """The student fields attached to attendance and payment records."""
    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
