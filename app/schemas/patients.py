"""Patient schemas for request/response validation."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import CamelModel, blank_to_none, is_valid_date

HN_PATTERN = re.compile(r"^[A-Za-z0-9]{6,20}$")
PHONE_PATTERN = re.compile(r"^[\d\-\+\(\)\s]{8,15}$")

REQUIRED_MESSAGES = {
    "hn": "Hospital Number (HN) is required",
    "first_name": "First name is required",
    "last_name": "Last name is required",
}


class PatientFields(CamelModel):
    """Patient fields accepted on create and update.

    Every field is optional at this level; blank strings count as absent.
    ``PatientCreate`` adds the required-field rules.
    """

    hn: str | None = Field(None, description="Hospital number")
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    date_of_birth: str | None = None
    phone: str | None = None
    address: str | None = Field(None, max_length=500)

    @field_validator("*", mode="before")
    @classmethod
    def drop_blank(cls, v: object) -> object:
        """Treat blank strings as absent."""
        return blank_to_none(v)

    @field_validator("hn")
    @classmethod
    def validate_hn(cls, v: str | None) -> str | None:
        """Validate hospital number format."""
        if v is not None and not HN_PATTERN.match(v):
            raise ValueError("HN must be 6-20 alphanumeric characters")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: str | None) -> str | None:
        """Validate date of birth format."""
        if v is not None and not is_valid_date(v.strip()):
            raise ValueError("Date of birth must be in YYYY-MM-DD format")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        if v is not None and not PHONE_PATTERN.match(v.strip()):
            raise ValueError("Phone number format is invalid")
        return v


class PatientCreate(PatientFields):
    """Schema for creating a new patient.

    HN, first name and last name are required; a missing one is reported
    together with any format error on the other fields.
    """

    hn: str | None = Field(None, description="Hospital number", validate_default=True)
    first_name: str | None = Field(None, max_length=100, validate_default=True)
    last_name: str | None = Field(None, max_length=100, validate_default=True)

    @field_validator("hn", "first_name", "last_name")
    @classmethod
    def require_value(cls, v: str | None, info: ValidationInfo) -> str | None:
        """Reject a missing or blank required field."""
        if v is None:
            raise ValueError(REQUIRED_MESSAGES[info.field_name])
        return v


class PatientUpdate(PatientFields):
    """Schema for updating a patient. Omitted fields keep their value."""


class PatientSummary(CamelModel):
    """Patient fields joined onto appointment responses."""

    hn: str
    first_name: str
    last_name: str
    phone: str | None = None


class PatientResponse(CamelModel):
    """Schema for patient response."""

    id: str
    hn: str
    first_name: str
    last_name: str
    date_of_birth: str | None = None
    phone: str | None = None
    address: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PatientFilters(BaseModel):
    """Patient list filters, applied in precedence order q, hn, phone."""

    q: str | None = None
    hn: str | None = None
    phone: str | None = None


class PatientSearchResponse(BaseModel):
    """Schema for the capped patient search."""

    items: list[PatientResponse]
    total: int
