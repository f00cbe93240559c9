"""Appointment service for business logic."""

import asyncio
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import structlog
from google.cloud.firestore import AsyncClient

from app.config import settings
from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.core.scheduling import (
    describe_conflict,
    find_conflicts,
    parse_calendar_date,
    parse_slot,
)
from app.models.appointments import DEFAULT_STATUS_COLOR, STATUS_COLORS, AppointmentRecord
from app.models.patients import PatientRecord
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentResponse,
    AppointmentsByDateResponse,
    AppointmentStatus,
    AppointmentUpdate,
    CalendarEvent,
    CalendarEventProps,
)
from app.schemas.common import Pagination, PaginatedResponse
from app.services.document_store import DocumentStore
from app.services.patient_service import PatientService

logger = structlog.get_logger(__name__)


def _slot_key(record: AppointmentRecord) -> datetime:
    """Sort key on the scheduled start; unreadable slots sort as oldest."""
    return (
        parse_slot(record.get("appointmentDate"), record.get("appointmentTime")) or datetime.min
    )


def status_color(status: str | None) -> str:
    """Calendar color for an appointment status."""
    return STATUS_COLORS.get(status or "", DEFAULT_STATUS_COLOR)


class AppointmentService:
    """Service for managing appointments."""

    def __init__(self, client: AsyncClient, patient_service: PatientService | None = None):
        """Initialize service with a Firestore client."""
        self.appointments = DocumentStore[AppointmentRecord](
            client, settings.appointments_collection
        )
        self.patient_service = patient_service or PatientService(client)

    async def _lookup_patients(
        self, records: Iterable[AppointmentRecord]
    ) -> dict[str, PatientRecord | None]:
        """Fetch the patients referenced by appointments, one read per patient."""
        patient_ids = list(dict.fromkeys(record["patientId"] for record in records))
        patients = await asyncio.gather(
            *(self.patient_service.find_patient(patient_id) for patient_id in patient_ids)
        )
        return dict(zip(patient_ids, patients, strict=True))

    async def _join(self, records: list[AppointmentRecord]) -> list[AppointmentResponse]:
        """Attach the live patient summary to each appointment."""
        patients = await self._lookup_patients(records)
        return [self._to_response(record, patients.get(record["patientId"])) for record in records]

    def _to_response(
        self, record: AppointmentRecord, patient: PatientRecord | None
    ) -> AppointmentResponse:
        response = AppointmentResponse.model_validate(record)
        if patient is not None:
            response.patient = self.patient_service.summarize(patient)
        return response

    async def _get_record(self, appointment_id: str) -> AppointmentRecord:
        record = await self.appointments.get_by_id(appointment_id)
        if record is None:
            raise NotFoundException("Appointment not found")
        return record

    async def _check_conflicts(
        self,
        appointment_date: str,
        start_time: str,
        end_time: str,
        doctor_name: str,
        exclude_id: str | None = None,
    ) -> None:
        """
        Reject a slot overlapping any appointment already booked that day.

        Raises:
            ConflictException: Listing every overlapping appointment
        """
        same_day = await self.appointments.query("appointmentDate", "==", appointment_date)
        conflicts = find_conflicts(
            appointment_date,
            start_time,
            end_time,
            same_day,
            exclude_id=exclude_id,
            doctor_name=doctor_name if settings.conflict_scope_per_doctor else None,
        )

        if conflicts:
            logger.info(
                "appointment_conflict_detected",
                appointment_date=appointment_date,
                start_time=start_time,
                end_time=end_time,
                conflicting_ids=[conflict.get("id") for conflict in conflicts],
            )
            raise ConflictException(
                "Time slot conflicts with existing appointment",
                conflicting_appointments=[describe_conflict(conflict) for conflict in conflicts],
            )

    async def list_appointments(
        self,
        filters: AppointmentFilters,
        pagination: Pagination,
    ) -> PaginatedResponse[AppointmentResponse]:
        """
        List appointments with filtering and pagination.

        Only the first filter set among date, doctor name, status and patient
        applies.

        Args:
            filters: Filter parameters
            pagination: Offset and limit

        Returns:
            Paginated list of appointments, latest slot first
        """
        # Only the first filter given applies
        if filters.date:
            records = await self.appointments.query("appointmentDate", "==", filters.date)
        elif filters.doctor_name:
            records = await self.appointments.search("doctorName", filters.doctor_name)
        elif filters.status:
            records = await self.appointments.query("status", "==", filters.status.value)
        elif filters.patient_id:
            records = await self.appointments.query("patientId", "==", filters.patient_id)
        else:
            records = await self.appointments.get_all()

        # Latest slot first
        joined = await self._join(sorted(records, key=_slot_key, reverse=True))
        return PaginatedResponse[AppointmentResponse].build(joined, pagination)

    async def get_appointment(self, appointment_id: str) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        record = await self._get_record(appointment_id)
        patient = await self.patient_service.find_patient(record["patientId"])
        return self._to_response(record, patient)

    async def get_appointments_by_date(self, appointment_date: str) -> AppointmentsByDateResponse:
        """
        Get the appointments of one day in chronological order.

        Raises:
            ValidationException: If the date is missing
        """
        if not appointment_date:
            raise ValidationException("Date parameter is required")

        records = await self.appointments.query("appointmentDate", "==", appointment_date)
        joined = await self._join(sorted(records, key=_slot_key))

        return AppointmentsByDateResponse(items=joined, date=appointment_date, total=len(joined))

    async def get_calendar_events(
        self,
        range_start: str | None = None,
        range_end: str | None = None,
    ) -> list[CalendarEvent]:
        """
        Render appointments as calendar events.

        Args:
            range_start: First calendar date to include
            range_end: Last calendar date to include

        Returns:
            One event per appointment; all appointments unless both bounds are set

        Raises:
            ValidationException: If a bound is not a date
        """
        records = await self.appointments.get_all()

        # Keep only appointments inside the range when both bounds are set
        if range_start and range_end:
            try:
                first = parse_calendar_date(range_start)
                last = parse_calendar_date(range_end)
            except ValueError:
                raise ValidationException("start and end must be ISO dates") from None

            in_range = []
            for record in records:
                try:
                    day = parse_calendar_date(record.get("appointmentDate", ""))
                except ValueError:
                    continue
                if first <= day <= last:
                    in_range.append(record)
            records = in_range

        patients = await self._lookup_patients(records)
        return [
            self._to_calendar_event(record, patients.get(record["patientId"]))
            for record in records
        ]

    @staticmethod
    def _to_calendar_event(
        record: AppointmentRecord, patient: PatientRecord | None
    ) -> CalendarEvent:
        if patient is not None:
            patient_name = f"{patient.get('firstName', '')} {patient.get('lastName', '')}".strip()
            patient_hn = patient.get("hn", "")
            phone = patient.get("phone")
        else:
            # Patient removed: fall back on the copy taken at booking time.
            patient_name = record.get("patientName", "")
            patient_hn = record.get("patientHN", "")
            phone = None

        color = status_color(record.get("status"))
        appointment_date = record["appointmentDate"]

        return CalendarEvent(
            id=record["id"],
            title=f"{record['doctorName']} - {patient_name}",
            start=f"{appointment_date}T{record['appointmentTime']}",
            end=f"{appointment_date}T{record['endTime']}",
            background_color=color,
            border_color=color,
            extended_props=CalendarEventProps(
                patient_hn=patient_hn,
                patient_name=patient_name,
                doctor_name=record["doctorName"],
                status=record.get("status", AppointmentStatus.SCHEDULED.value),
                notes=record.get("notes"),
                phone=phone,
            ),
        )

    async def create_appointment(self, data: AppointmentCreate) -> AppointmentResponse:
        """
        Book a new appointment.

        Args:
            data: Appointment creation data

        Returns:
            Created appointment joined with its patient

        Raises:
            ValidationException: If the patient does not exist
            ConflictException: If the slot overlaps an existing appointment
        """
        # Check the patient exists
        patient = await self.patient_service.find_patient(data.patient_id)
        if patient is None:
            raise ValidationException("Patient not found")

        # Check for time conflicts
        await self._check_conflicts(
            data.appointment_date,
            data.appointment_time,
            data.end_time,
            doctor_name=data.doctor_name,
        )

        # Snapshot the patient HN and name on the appointment
        values: dict[str, Any] = {
            "patientId": data.patient_id,
            "patientHN": patient["hn"],
            "patientName": f"{patient['firstName']} {patient['lastName']}",
            "doctorName": data.doctor_name,
            "appointmentDate": data.appointment_date,
            "appointmentTime": data.appointment_time,
            "endTime": data.end_time,
            "status": AppointmentStatus.SCHEDULED.value,
            "notes": data.notes.strip() if data.notes else None,
        }

        appointment_id, record = await self.appointments.create(values)
        logger.info(
            "appointment_created",
            appointment_id=appointment_id,
            patient_id=data.patient_id,
            appointment_date=data.appointment_date,
        )

        return self._to_response(record, patient)

    async def update_appointment(
        self,
        appointment_id: str,
        data: AppointmentUpdate,
    ) -> AppointmentResponse:
        """
        Update an existing appointment.

        When the date or either time changes, the resulting slot is checked
        against the other appointments of that day.

        Args:
            appointment_id: Appointment ID
            data: Update data

        Returns:
            Updated appointment joined with its patient

        Raises:
            NotFoundException: If appointment not found
            ValidationException: If the resulting end time is not after the start
            ConflictException: If the new slot overlaps another appointment
        """
        # Check appointment exists
        existing = await self._get_record(appointment_id)

        # Build update values
        update_values: dict[str, Any] = {
            "doctorName": data.doctor_name,
            "appointmentDate": data.appointment_date,
            "appointmentTime": data.appointment_time,
            "endTime": data.end_time,
            "status": data.status.value if data.status else None,
            "notes": data.notes.strip() if data.notes else None,
        }

        # Re-check the slot when the date or either time changes
        if data.appointment_date or data.appointment_time or data.end_time:
            # Fall back on stored values for the parts not being changed
            check_date = data.appointment_date or existing["appointmentDate"]
            check_start = data.appointment_time or existing["appointmentTime"]
            check_end = data.end_time or existing["endTime"]

            start = parse_slot(check_date, check_start)
            end = parse_slot(check_date, check_end)
            if start and end and end <= start:
                raise ValidationException(
                    "Validation failed", details=["End time must be after appointment time"]
                )

            await self._check_conflicts(
                check_date,
                check_start,
                check_end,
                doctor_name=data.doctor_name or existing["doctorName"],
                exclude_id=appointment_id,
            )

        record = await self.appointments.update(appointment_id, update_values)
        if record is None:
            raise NotFoundException("Appointment not found")

        logger.info(
            "appointment_updated",
            appointment_id=appointment_id,
            fields=sorted(key for key, value in update_values.items() if value is not None),
        )

        patient = await self.patient_service.find_patient(record["patientId"])
        return self._to_response(record, patient)

    async def delete_appointment(self, appointment_id: str) -> None:
        """
        Delete an appointment.

        Raises:
            NotFoundException: If appointment not found
        """
        # Check appointment exists
        await self._get_record(appointment_id)

        if not await self.appointments.delete(appointment_id):
            raise NotFoundException("Appointment not found")

        logger.info("appointment_deleted", appointment_id=appointment_id)
