"""Tests for appointment endpoints."""

import pytest
from httpx import AsyncClient


def booking(patient: dict, sample_appointment_data: dict, **overrides) -> dict:
    return {**sample_appointment_data, "patientId": patient["id"], **overrides}


@pytest.mark.asyncio
async def test_create_appointment(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test booking an appointment."""
    response = await client.post(
        "/api/v1/appointments", json=booking(patient, sample_appointment_data)
    )

    assert response.status_code == 201
    data = response.json()
    assert data["doctorName"] == "Dr. Suda Wong"
    assert data["status"] == "scheduled"
    assert data["patientHN"] == "HN000123"
    assert data["patientName"] == "Somchai Jaidee"
    assert data["patient"] == {
        "hn": "HN000123",
        "firstName": "Somchai",
        "lastName": "Jaidee",
        "phone": "081-234-5678",
    }


@pytest.mark.asyncio
async def test_create_appointment_validation(client: AsyncClient) -> None:
    """Test format and order rules on the request body."""
    response = await client.post(
        "/api/v1/appointments",
        json={
            "patientId": "p1",
            "doctorName": "Dr. A",
            "appointmentDate": "15/03/2030",
            "appointmentTime": "9am",
            "endTime": "09:30",
        },
    )

    assert response.status_code == 400
    assert response.json()["details"] == [
        "Appointment date must be in YYYY-MM-DD format",
        "Appointment time must be in HH:MM format",
    ]


@pytest.mark.asyncio
async def test_create_appointment_mixed_errors(client: AsyncClient) -> None:
    """Test that missing fields are listed with the format errors."""
    response = await client.post(
        "/api/v1/appointments",
        json={"appointmentDate": "15/03/2030", "appointmentTime": "09:00"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation failed",
        "details": [
            "Doctor name is required",
            "Appointment date must be in YYYY-MM-DD format",
            "End time is required",
            "Patient ID is required",
        ],
    }


@pytest.mark.asyncio
async def test_create_appointment_end_before_start(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test that the end time must follow the start time."""
    response = await client.post(
        "/api/v1/appointments",
        json=booking(patient, sample_appointment_data, appointmentTime="10:00", endTime="10:00"),
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation failed",
        "details": ["End time must be after appointment time"],
    }


@pytest.mark.asyncio
async def test_create_appointment_unknown_patient(
    client: AsyncClient, sample_appointment_data: dict
) -> None:
    """Test booking for a patient that does not exist."""
    response = await client.post(
        "/api/v1/appointments", json={**sample_appointment_data, "patientId": "ghost"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Patient not found"}


@pytest.mark.asyncio
async def test_conflicting_appointment(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test the conflict response lists the overlapping booking."""
    first = await client.post(
        "/api/v1/appointments", json=booking(patient, sample_appointment_data)
    )

    overlapping = await client.post(
        "/api/v1/appointments",
        json=booking(
            patient,
            sample_appointment_data,
            doctorName="Dr. Anan Chai",
            appointmentTime="09:15",
            endTime="09:45",
        ),
    )
    adjacent = await client.post(
        "/api/v1/appointments",
        json=booking(patient, sample_appointment_data, appointmentTime="09:30", endTime="10:00"),
    )

    assert overlapping.status_code == 400
    assert overlapping.json() == {
        "error": "Time slot conflicts with existing appointment",
        "conflictingAppointments": [
            {"id": first.json()["id"], "time": "09:00 - 09:30", "doctor": "Dr. Suda Wong"}
        ],
    }
    assert adjacent.status_code == 201


@pytest.mark.asyncio
async def test_list_appointments(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test listing appointments with filters."""
    await client.post("/api/v1/appointments", json=booking(patient, sample_appointment_data))
    await client.post(
        "/api/v1/appointments",
        json=booking(patient, sample_appointment_data, appointmentDate="2030-03-20"),
    )

    everything = await client.get("/api/v1/appointments")
    one_day = await client.get("/api/v1/appointments", params={"date": "2030-03-20"})
    by_doctor = await client.get("/api/v1/appointments", params={"doctorName": "Dr. Nobody"})
    bad_status = await client.get("/api/v1/appointments", params={"status": "lost"})

    assert everything.status_code == 200
    assert [a["appointmentDate"] for a in everything.json()["items"]] == [
        "2030-03-20",
        "2030-03-15",
    ]
    assert everything.json()["totalPages"] == 1
    assert one_day.json()["total"] == 1
    assert by_doctor.json()["items"] == []
    assert bad_status.status_code == 400


@pytest.mark.asyncio
async def test_appointments_by_date(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test the day view."""
    await client.post(
        "/api/v1/appointments",
        json=booking(patient, sample_appointment_data, appointmentTime="11:00", endTime="11:30"),
    )
    await client.post("/api/v1/appointments", json=booking(patient, sample_appointment_data))

    response = await client.get("/api/v1/appointments/date/2030-03-15")

    assert response.status_code == 200
    data = response.json()
    assert data["date"] == "2030-03-15"
    assert data["total"] == 2
    assert [a["appointmentTime"] for a in data["items"]] == ["09:00", "11:00"]


@pytest.mark.asyncio
async def test_calendar_events(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test the calendar feed shape."""
    created = await client.post(
        "/api/v1/appointments", json=booking(patient, sample_appointment_data)
    )

    response = await client.get(
        "/api/v1/appointments/calendar", params={"start": "2030-03-01", "end": "2030-03-31"}
    )
    empty = await client.get(
        "/api/v1/appointments/calendar", params={"start": "2030-04-01", "end": "2030-04-30"}
    )

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": created.json()["id"],
            "title": "Dr. Suda Wong - Somchai Jaidee",
            "start": "2030-03-15T09:00",
            "end": "2030-03-15T09:30",
            "backgroundColor": "#3788d8",
            "borderColor": "#3788d8",
            "extendedProps": {
                "patientHN": "HN000123",
                "patientName": "Somchai Jaidee",
                "doctorName": "Dr. Suda Wong",
                "status": "scheduled",
                "notes": "Follow-up visit",
                "phone": "081-234-5678",
            },
        }
    ]
    assert empty.json() == []


@pytest.mark.asyncio
async def test_update_appointment(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test confirming and rescheduling an appointment."""
    created = await client.post(
        "/api/v1/appointments", json=booking(patient, sample_appointment_data)
    )
    appointment_id = created.json()["id"]

    response = await client.put(
        f"/api/v1/appointments/{appointment_id}",
        json={"status": "confirmed", "appointmentTime": "09:15", "endTime": "09:45"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "confirmed"
    assert (data["appointmentTime"], data["endTime"]) == ("09:15", "09:45")
    assert data["doctorName"] == "Dr. Suda Wong"


@pytest.mark.asyncio
async def test_update_appointment_invalid_status(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test that unknown statuses are rejected."""
    created = await client.post(
        "/api/v1/appointments", json=booking(patient, sample_appointment_data)
    )

    response = await client.put(
        f"/api/v1/appointments/{created.json()['id']}", json={"status": "lost"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


@pytest.mark.asyncio
async def test_update_appointment_blank_doctor_name(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test that a blank doctor name is rejected instead of ignored."""
    created = await client.post(
        "/api/v1/appointments", json=booking(patient, sample_appointment_data)
    )
    appointment_id = created.json()["id"]

    response = await client.put(
        f"/api/v1/appointments/{appointment_id}", json={"doctorName": "  ", "notes": ""}
    )
    unchanged = await client.get(f"/api/v1/appointments/{appointment_id}")

    assert response.status_code == 400
    assert response.json()["details"] == ["Doctor name is required"]
    assert unchanged.json()["doctorName"] == "Dr. Suda Wong"


@pytest.mark.asyncio
async def test_get_and_delete_appointment(
    client: AsyncClient, patient: dict, sample_appointment_data: dict
) -> None:
    """Test fetching then deleting an appointment."""
    created = await client.post(
        "/api/v1/appointments", json=booking(patient, sample_appointment_data)
    )
    appointment_id = created.json()["id"]

    fetched = await client.get(f"/api/v1/appointments/{appointment_id}")
    deleted = await client.delete(f"/api/v1/appointments/{appointment_id}")
    missing = await client.get(f"/api/v1/appointments/{appointment_id}")

    assert fetched.json() == created.json()
    assert deleted.json() == {"message": "Appointment deleted successfully"}
    assert missing.status_code == 404
    assert missing.json() == {"error": "Appointment not found"}
