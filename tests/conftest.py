from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.dependencies import get_firestore_client
from app.main import app
from app.services.appointment_service import AppointmentService
from app.services.patient_service import PatientService
from tests.fakes import FakeFirestoreClient


@pytest.fixture
def firestore() -> FakeFirestoreClient:
    """Fresh in-memory Firestore for each test."""
    return FakeFirestoreClient()


@pytest.fixture
def patient_service(firestore: FakeFirestoreClient) -> PatientService:
    """Patient service bound to the in-memory store."""
    return PatientService(firestore)  # type: ignore[arg-type]


@pytest.fixture
def appointment_service(
    firestore: FakeFirestoreClient, patient_service: PatientService
) -> AppointmentService:
    """Appointment service bound to the in-memory store."""
    return AppointmentService(firestore, patient_service)  # type: ignore[arg-type]


@pytest_asyncio.fixture
async def client(firestore: FakeFirestoreClient) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    app.dependency_overrides[get_firestore_client] = lambda: firestore

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_patient_data() -> dict:
    """Sample patient data for testing."""
    return {
        "hn": "HN000123",
        "firstName": "Somchai",
        "lastName": "Jaidee",
        "dateOfBirth": "1985-04-12",
        "phone": "081-234-5678",
        "address": "99 Sukhumvit Road, Bangkok",
    }


@pytest.fixture
def sample_appointment_data() -> dict:
    """Sample appointment data for testing, without the patient id."""
    return {
        "doctorName": "Dr. Suda Wong",
        "appointmentDate": "2030-03-15",
        "appointmentTime": "09:00",
        "endTime": "09:30",
        "notes": "Follow-up visit",
    }


@pytest_asyncio.fixture
async def patient(client: AsyncClient, sample_patient_data: dict) -> dict:
    """A patient created through the API."""
    response = await client.post("/api/v1/patients", json=sample_patient_data)
    assert response.status_code == 201
    return response.json()
