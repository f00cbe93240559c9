"""Patient service for business logic."""

import asyncio
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import structlog
from google.cloud.firestore import AsyncClient

from app.config import settings
from app.core.exceptions import (
    ConflictException,
    DependencyException,
    NotFoundException,
    ValidationException,
)
from app.models.appointments import AppointmentRecord
from app.models.patients import (
    PATIENT_LIST_SEARCH_FIELDS,
    PATIENT_SEARCH_FIELDS,
    PatientRecord,
)
from app.schemas.common import Pagination, PaginatedResponse
from app.schemas.patients import (
    PatientCreate,
    PatientFilters,
    PatientResponse,
    PatientSearchResponse,
    PatientSummary,
    PatientUpdate,
)
from app.services.document_store import DocumentStore

logger = structlog.get_logger(__name__)


def _created_at_key(record: PatientRecord) -> float:
    """Sort key on creation time; records without one sort as oldest."""
    created_at = record.get("createdAt")
    if isinstance(created_at, datetime):
        return created_at.timestamp()
    return float("-inf")


def sort_newest_first(records: Iterable[PatientRecord]) -> list[PatientRecord]:
    """Order patients by creation time, most recent first."""
    return sorted(records, key=_created_at_key, reverse=True)


def _dedupe(result_sets: Iterable[list[PatientRecord]]) -> list[PatientRecord]:
    """Concatenate result sets, keeping the first occurrence of each id."""
    seen: set[str] = set()
    merged: list[PatientRecord] = []
    for results in result_sets:
        for record in results:
            if record["id"] in seen:
                continue
            seen.add(record["id"])
            merged.append(record)
    return merged


class PatientService:
    """Service for managing patients."""

    def __init__(self, client: AsyncClient):
        """Initialize service with a Firestore client."""
        self.patients = DocumentStore[PatientRecord](client, settings.patients_collection)
        self.appointments = DocumentStore[AppointmentRecord](
            client, settings.appointments_collection
        )

    async def _search_fields(self, fields: Iterable[str], term: str) -> list[PatientRecord]:
        """Prefix-search several fields concurrently and merge the results."""
        result_sets = await asyncio.gather(
            *(self.patients.search(field, term) for field in fields)
        )
        return _dedupe(result_sets)

    async def _ensure_unique_hn(self, hn: str) -> None:
        existing = await self.patients.query("hn", "==", hn)
        if existing:
            logger.info("patient_duplicate_hn", hn=hn)
            raise ConflictException("Patient with this HN already exists")

    async def find_patient(self, patient_id: str) -> PatientRecord | None:
        """Fetch a patient record, or None when it does not exist."""
        return await self.patients.get_by_id(patient_id)

    @staticmethod
    def summarize(record: PatientRecord) -> PatientSummary:
        """Reduce a patient record to the fields joined onto appointments."""
        return PatientSummary.model_validate(record)

    async def list_patients(
        self,
        filters: PatientFilters,
        pagination: Pagination,
    ) -> PaginatedResponse[PatientResponse]:
        """
        List patients with filtering and pagination.

        Only the first filter set among ``q``, ``hn`` and ``phone`` applies.

        Args:
            filters: Search filters
            pagination: Offset and limit

        Returns:
            Paginated list of patients, newest first
        """
        # Only the first filter given applies
        if filters.q:
            records = await self._search_fields(PATIENT_LIST_SEARCH_FIELDS, filters.q)
        elif filters.hn:
            records = await self.patients.search("hn", filters.hn)
        elif filters.phone:
            records = await self.patients.search("phone", filters.phone)
        else:
            records = await self.patients.get_all()

        return PaginatedResponse[PatientResponse].build(sort_newest_first(records), pagination)

    async def search_patients(self, term: str | None) -> PatientSearchResponse:
        """
        Search patients by name, HN or phone prefix.

        Args:
            term: Prefix to look for

        Returns:
            The most recently created matches, capped

        Raises:
            ValidationException: If the term is blank
        """
        if not term or not term.strip():
            raise ValidationException("Search query is required")

        records = await self._search_fields(PATIENT_SEARCH_FIELDS, term)
        # Most recent matches only
        capped = sort_newest_first(records)[: settings.patient_search_limit]

        return PatientSearchResponse(
            items=[PatientResponse.model_validate(record) for record in capped],
            total=len(capped),
        )

    async def get_patient(self, patient_id: str) -> PatientResponse:
        """
        Get patient by ID.

        Raises:
            NotFoundException: If patient not found
        """
        record = await self.patients.get_by_id(patient_id)
        if record is None:
            raise NotFoundException("Patient not found")
        return PatientResponse.model_validate(record)

    async def create_patient(self, data: PatientCreate) -> PatientResponse:
        """
        Create a new patient.

        Args:
            data: Patient creation data

        Returns:
            Created patient

        Raises:
            ConflictException: If another patient already has this HN
        """
        # Check for duplicate HN
        await self._ensure_unique_hn(data.hn)

        values: dict[str, Any] = {
            key: value.strip()
            for key, value in data.model_dump(by_alias=True, exclude_none=True).items()
        }

        patient_id, record = await self.patients.create(values)
        logger.info("patient_created", patient_id=patient_id, hn=record["hn"])

        return PatientResponse.model_validate(record)

    async def update_patient(self, patient_id: str, data: PatientUpdate) -> PatientResponse:
        """
        Update an existing patient.

        Blank or omitted fields keep their stored value, so a field cannot be
        cleared through this call.

        Args:
            patient_id: Patient ID
            data: Update data

        Returns:
            Updated patient

        Raises:
            NotFoundException: If patient not found
            ConflictException: If the new HN belongs to another patient
        """
        # Check patient exists
        existing = await self.patients.get_by_id(patient_id)
        if existing is None:
            raise NotFoundException("Patient not found")

        # Only a changed HN needs the duplicate check
        if data.hn and data.hn != existing["hn"]:
            await self._ensure_unique_hn(data.hn)

        # Blank fields were dropped by the schema and keep their stored value
        update_values = {
            key: value.strip()
            for key, value in data.model_dump(by_alias=True, exclude_none=True).items()
        }

        record = await self.patients.update(patient_id, update_values)
        if record is None:
            raise NotFoundException("Patient not found")

        logger.info("patient_updated", patient_id=patient_id, fields=sorted(update_values))
        return PatientResponse.model_validate(record)

    async def delete_patient(self, patient_id: str) -> None:
        """
        Delete a patient that no appointment refers to.

        Raises:
            NotFoundException: If patient not found
            DependencyException: If appointments still reference the patient
        """
        existing = await self.patients.get_by_id(patient_id)
        if existing is None:
            raise NotFoundException("Patient not found")

        # Refuse while appointments still reference the patient
        referencing = await self.appointments.query("patientId", "==", patient_id)
        if referencing:
            raise DependencyException(
                "Cannot delete patient with existing appointments",
                appointment_count=len(referencing),
            )

        if not await self.patients.delete(patient_id):
            raise NotFoundException("Patient not found")

        logger.info("patient_deleted", patient_id=patient_id)
