"""Appointment slot arithmetic and conflict detection.

Appointments carry a calendar date plus wall-clock start and end times with
no timezone. Slots are compared as half-open intervals ``[start, end)``, so an
appointment that ends at 09:30 does not collide with one starting at 09:30.
Appointments never cross midnight.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any


def parse_slot(day: str | None, time: str | None) -> datetime | None:
    """Combine ``YYYY-MM-DD`` and ``HH:MM[:SS]`` into a naive datetime.

    Returns None when either part is missing or malformed.
    """
    if not day or not time:
        return None
    try:
        return datetime.fromisoformat(f"{day}T{time}")
    except ValueError:
        return None


def parse_calendar_date(value: str) -> date:
    """Read the date part of an ISO date or timestamp string."""
    return date.fromisoformat(value.strip()[:10])


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """True when ``[start_a, end_a)`` and ``[start_b, end_b)`` share any instant."""
    return start_a < end_b and end_a > start_b


def find_conflicts(
    appointment_date: str,
    start_time: str,
    end_time: str,
    existing: Iterable[Mapping[str, Any]],
    exclude_id: str | None = None,
    doctor_name: str | None = None,
) -> list[Mapping[str, Any]]:
    """
    Scan existing appointments for ones overlapping the requested slot.

    Args:
        appointment_date: Date of the requested slot
        start_time: Requested start time
        end_time: Requested end time
        existing: Appointments already booked on the same date
        exclude_id: Appointment to ignore, used when rescheduling it
        doctor_name: Only compare against this doctor's appointments

    Returns:
        Overlapping appointments, in scan order
    """
    start = parse_slot(appointment_date, start_time)
    end = parse_slot(appointment_date, end_time)
    if start is None or end is None:
        return []

    conflicts = []
    for appointment in existing:
        if exclude_id is not None and appointment.get("id") == exclude_id:
            continue
        if doctor_name is not None and appointment.get("doctorName") != doctor_name:
            continue

        other_date = appointment.get("appointmentDate")
        other_start = parse_slot(other_date, appointment.get("appointmentTime"))
        other_end = parse_slot(other_date, appointment.get("endTime"))
        # Unreadable stored slots are ignored rather than blocking the booking.
        if other_start is None or other_end is None:
            continue

        if intervals_overlap(start, end, other_start, other_end):
            conflicts.append(appointment)

    return conflicts


def describe_conflict(appointment: Mapping[str, Any]) -> dict[str, Any]:
    """Summary of a conflicting appointment for error responses."""
    return {
        "id": appointment.get("id"),
        "time": f"{appointment.get('appointmentTime')} - {appointment.get('endTime')}",
        "doctor": appointment.get("doctorName"),
    }
