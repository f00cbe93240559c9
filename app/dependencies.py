"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from google.cloud.firestore import AsyncClient

from app.core.firebase import get_firestore
from app.services.appointment_service import AppointmentService
from app.services.patient_service import PatientService


def get_firestore_client() -> AsyncClient:
    """Firestore client used by the request. Overridden in tests."""
    return get_firestore()


FirestoreClient = Annotated[AsyncClient, Depends(get_firestore_client)]


def get_patient_service(client: FirestoreClient) -> PatientService:
    """Build the patient service for one request."""
    return PatientService(client)


def get_appointment_service(
    client: FirestoreClient,
    patient_service: Annotated[PatientService, Depends(get_patient_service)],
) -> AppointmentService:
    """Build the appointment service for one request."""
    return AppointmentService(client, patient_service)


# Type aliases for dependency injection
PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
