"""Patient endpoints."""

from fastapi import APIRouter, Query, status

from app.config import settings
from app.dependencies import PatientServiceDep
from app.schemas.common import MessageResponse, PaginatedResponse, Pagination
from app.schemas.patients import (
    PatientCreate,
    PatientFilters,
    PatientResponse,
    PatientSearchResponse,
    PatientUpdate,
)

router = APIRouter()


@router.get(
    "",
    response_model=PaginatedResponse[PatientResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="List patients",
)
async def list_patients(
    service: PatientServiceDep,
    q: str | None = Query(None, description="Prefix of first name, last name or HN"),
    hn: str | None = Query(None, description="HN prefix"),
    phone: str | None = Query(None, description="Phone prefix"),
    limit: int = Query(settings.patient_page_size, ge=1),
    offset: int = Query(0, ge=0),
) -> PaginatedResponse[PatientResponse]:
    """
    List patients, newest first.

    Args:
        service: Patient service
        q: Free-text prefix, takes precedence over hn and phone
        hn: HN prefix, takes precedence over phone
        phone: Phone prefix
        limit: Page size
        offset: Number of patients to skip

    Returns:
        Paginated list of patients
    """
    filters = PatientFilters(q=q, hn=hn, phone=phone)
    return await service.list_patients(filters, Pagination(limit=limit, offset=offset))


@router.get(
    "/search",
    response_model=PatientSearchResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Search patients",
)
async def search_patients(
    service: PatientServiceDep,
    q: str | None = Query(None, description="Prefix of name, HN or phone"),
) -> PatientSearchResponse:
    """Search patients by name, HN or phone prefix, most recent first."""
    return await service.search_patients(q)


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Get patient by ID",
)
async def get_patient(patient_id: str, service: PatientServiceDep) -> PatientResponse:
    """Get a specific patient by ID."""
    return await service.get_patient(patient_id)


@router.post(
    "",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create new patient",
)
async def create_patient(data: PatientCreate, service: PatientServiceDep) -> PatientResponse:
    """
    Register a new patient.

    Args:
        data: Patient creation data
        service: Patient service

    Returns:
        Created patient
    """
    return await service.create_patient(data)


@router.put(
    "/{patient_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Update patient",
)
async def update_patient(
    patient_id: str,
    data: PatientUpdate,
    service: PatientServiceDep,
) -> PatientResponse:
    """
    Update an existing patient.

    Blank fields are ignored and keep their stored value.

    Args:
        patient_id: Patient ID
        data: Update data
        service: Patient service

    Returns:
        Updated patient
    """
    return await service.update_patient(patient_id, data)


@router.delete(
    "/{patient_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete patient",
)
async def delete_patient(patient_id: str, service: PatientServiceDep) -> MessageResponse:
    """Delete a patient that has no appointments."""
    await service.delete_patient(patient_id)
    return MessageResponse(message="Patient deleted successfully")
