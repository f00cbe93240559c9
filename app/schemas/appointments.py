"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from app.core.scheduling import parse_slot
from app.schemas.common import CamelModel, blank_to_none, is_valid_date, is_valid_time
from app.schemas.patients import PatientSummary

REQUIRED_MESSAGES = {
    "patient_id": "Patient ID is required",
    "doctor_name": "Doctor name is required",
    "appointment_date": "Appointment date is required",
    "appointment_time": "Appointment time is required",
    "end_time": "End time is required",
}


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class AppointmentSlotFields(CamelModel):
    """Date and time fields with their format rules."""

    doctor_name: str | None = Field(None, max_length=200)
    appointment_date: str | None = Field(None, description="YYYY-MM-DD")
    appointment_time: str | None = Field(None, description="Start time, HH:MM")
    end_time: str | None = Field(None, description="End time, HH:MM")
    notes: str | None = Field(None, max_length=1000)

    @field_validator("appointment_date", "appointment_time", "end_time", "notes", mode="before")
    @classmethod
    def drop_blank(cls, v: object) -> object:
        """Treat blank strings as absent."""
        return blank_to_none(v)

    @field_validator("doctor_name", mode="before")
    @classmethod
    def reject_blank_doctor(cls, v: object) -> object:
        """A doctor name, when sent, cannot be blank."""
        if isinstance(v, str) and not v.strip():
            raise ValueError(REQUIRED_MESSAGES["doctor_name"])
        return v

    @field_validator("appointment_date")
    @classmethod
    def validate_date(cls, v: str | None) -> str | None:
        """Validate appointment date format."""
        if v is not None and not is_valid_date(v):
            raise ValueError("Appointment date must be in YYYY-MM-DD format")
        return v

    @field_validator("appointment_time")
    @classmethod
    def validate_start_time(cls, v: str | None) -> str | None:
        """Validate start time format."""
        if v is not None and not is_valid_time(v):
            raise ValueError("Appointment time must be in HH:MM format")
        return v

    @field_validator("end_time")
    @classmethod
    def validate_end_time(cls, v: str | None) -> str | None:
        """Validate end time format."""
        if v is not None and not is_valid_time(v):
            raise ValueError("End time must be in HH:MM format")
        return v

    @model_validator(mode="after")
    def validate_time_order(self) -> "AppointmentSlotFields":
        """Validate end time is after start time when both are given."""
        if self.appointment_time and self.end_time:
            # Any valid date works: only the time of day is compared.
            start = parse_slot("2000-01-01", self.appointment_time)
            end = parse_slot("2000-01-01", self.end_time)
            if start and end and end <= start:
                raise ValueError("End time must be after appointment time")
        return self


class AppointmentCreate(AppointmentSlotFields):
    """Schema for creating a new appointment.

    Missing required fields are reported together with format errors.
    """

    doctor_name: str | None = Field(None, max_length=200, validate_default=True)
    appointment_date: str | None = Field(None, description="YYYY-MM-DD", validate_default=True)
    appointment_time: str | None = Field(
        None, description="Start time, HH:MM", validate_default=True
    )
    end_time: str | None = Field(None, description="End time, HH:MM", validate_default=True)
    patient_id: str | None = Field(None, validate_default=True)

    @field_validator("patient_id", mode="before")
    @classmethod
    def drop_blank_patient(cls, v: object) -> object:
        """Treat a blank patient id as absent."""
        return blank_to_none(v)

    @field_validator(
        "patient_id", "doctor_name", "appointment_date", "appointment_time", "end_time"
    )
    @classmethod
    def require_value(cls, v: str | None, info: ValidationInfo) -> str | None:
        """Reject a missing or blank required field."""
        if v is None:
            raise ValueError(REQUIRED_MESSAGES[info.field_name])
        return v


class AppointmentUpdate(AppointmentSlotFields):
    """Schema for updating an appointment.

    Omitted fields keep their value. A blank doctor name is rejected rather
    than ignored; blank notes are ignored.
    """

    status: AppointmentStatus | None = None


class AppointmentResponse(CamelModel):
    """Schema for appointment response, joined with the live patient summary."""

    id: str
    patient_id: str
    patient_hn: str | None = Field(None, alias="patientHN")
    patient_name: str | None = None
    doctor_name: str
    appointment_date: str
    appointment_time: str
    end_time: str
    status: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    patient: PatientSummary | None = None


class AppointmentFilters(BaseModel):
    """Appointment list filters, applied in precedence order."""

    date: str | None = None
    doctor_name: str | None = None
    status: AppointmentStatus | None = None
    patient_id: str | None = None


class AppointmentsByDateResponse(BaseModel):
    """Appointments booked on one date, earliest first."""

    items: list[AppointmentResponse]
    date: str
    total: int


class CalendarEventProps(CamelModel):
    """Extra calendar event data shown in the event popover."""

    patient_hn: str = Field("", alias="patientHN")
    patient_name: str
    doctor_name: str
    status: str
    notes: str | None = None
    phone: str | None = None


class CalendarEvent(CamelModel):
    """Appointment rendered as a calendar event."""

    id: str
    title: str
    start: str
    end: str
    background_color: str
    border_color: str
    extended_props: CalendarEventProps
