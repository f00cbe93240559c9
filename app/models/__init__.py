"""Firestore document shapes."""

from app.models.appointments import AppointmentRecord
from app.models.patients import PatientRecord

__all__ = [
    "AppointmentRecord",
    "PatientRecord",
]
