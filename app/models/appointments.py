"""Appointment document shape as stored in Firestore."""

from datetime import datetime
from typing import NotRequired, TypedDict


class AppointmentRecord(TypedDict):
    """A document of the appointments collection, with its id attached.

    ``patientHN`` and ``patientName`` are copied from the patient when the
    appointment is booked and are not refreshed afterwards.
    """

    id: NotRequired[str]
    patientId: str
    patientHN: NotRequired[str]
    patientName: NotRequired[str]
    doctorName: str
    appointmentDate: str
    appointmentTime: str
    endTime: str
    status: str
    notes: NotRequired[str]
    createdAt: NotRequired[datetime]
    updatedAt: NotRequired[datetime]


# Calendar colors keyed by appointment status.
STATUS_COLORS = {
    "scheduled": "#3788d8",
    "confirmed": "#28a745",
    "completed": "#6c757d",
    "cancelled": "#dc3545",
    "no-show": "#fd7e14",
}
DEFAULT_STATUS_COLOR = "#3788d8"
