"""Appointment endpoints."""

from fastapi import APIRouter, Query, status

from app.config import settings
from app.dependencies import AppointmentServiceDep
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentResponse,
    AppointmentsByDateResponse,
    AppointmentStatus,
    AppointmentUpdate,
    CalendarEvent,
)
from app.schemas.common import MessageResponse, PaginatedResponse, Pagination

router = APIRouter()


@router.get(
    "",
    response_model=PaginatedResponse[AppointmentResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="List appointments",
)
async def list_appointments(
    service: AppointmentServiceDep,
    date: str | None = Query(None, description="Exact appointment date, YYYY-MM-DD"),
    doctor_name: str | None = Query(None, alias="doctorName", description="Doctor name prefix"),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    patient_id: str | None = Query(None, alias="patientId"),
    limit: int = Query(settings.appointment_page_size, ge=1),
    offset: int = Query(0, ge=0),
) -> PaginatedResponse[AppointmentResponse]:
    """
    List appointments joined with their patient, latest slot first.

    Args:
        service: Appointment service
        date: Filter by date (highest precedence)
        doctor_name: Filter by doctor name prefix
        status_filter: Filter by status
        patient_id: Filter by patient (lowest precedence)
        limit: Page size
        offset: Number of appointments to skip

    Returns:
        Paginated list of appointments
    """
    filters = AppointmentFilters(
        date=date,
        doctor_name=doctor_name,
        status=status_filter,
        patient_id=patient_id,
    )
    return await service.list_appointments(filters, Pagination(limit=limit, offset=offset))


@router.get(
    "/calendar",
    response_model=list[CalendarEvent],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Appointments as calendar events",
)
async def get_calendar_events(
    service: AppointmentServiceDep,
    start: str | None = Query(None, description="First date of the range"),
    end: str | None = Query(None, description="Last date of the range"),
) -> list[CalendarEvent]:
    """
    Get appointments formatted for a calendar widget.

    Both bounds are inclusive and compared as calendar dates; without both
    bounds every appointment is returned.
    """
    return await service.get_calendar_events(start, end)


@router.get(
    "/date/{appointment_date}",
    response_model=AppointmentsByDateResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Appointments of one day",
)
async def get_appointments_by_date(
    appointment_date: str,
    service: AppointmentServiceDep,
) -> AppointmentsByDateResponse:
    """Get the appointments of one day, earliest first."""
    return await service.get_appointments_by_date(appointment_date)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: str,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Get a specific appointment by ID."""
    return await service.get_appointment(appointment_id)


@router.post(
    "",
    response_model=AppointmentResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Book a new appointment.

    Args:
        data: Appointment creation data
        service: Appointment service

    Returns:
        Created appointment
    """
    return await service.create_appointment(data)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Update an existing appointment.

    Args:
        appointment_id: Appointment ID
        data: Update data
        service: Appointment service

    Returns:
        Updated appointment
    """
    return await service.update_appointment(appointment_id, data)


@router.delete(
    "/{appointment_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: str,
    service: AppointmentServiceDep,
) -> MessageResponse:
    """Delete an appointment."""
    await service.delete_appointment(appointment_id)
    return MessageResponse(message="Appointment deleted successfully")
