"""Tests for evolution endpoints."""

import pytest
from httpx import AsyncClient


async def in_progress_appointment(
    client: AsyncClient,
    receptionist_headers: dict,
    physician_headers: dict,
    data: dict,
) -> int:
    created = await client.post("/api/v1/appointments", json=data, headers=receptionist_headers)
    appointment_id = created.json()["id"]
    await client.post(
        f"/api/v1/appointments/{appointment_id}/check-in", headers=receptionist_headers
    )
    await client.post(f"/api/v1/appointments/{appointment_id}/start", headers=physician_headers)
    return appointment_id


@pytest.fixture
def booking(patient: dict, professional: dict, consultation: dict) -> dict:
    return {
        "patient_id": patient["id"],
        "professional_id": professional["id"],
        "date": "2024-06-01T09:00:00.000Z",
        "procedure_ids": [consultation["id"]],
    }


@pytest.mark.asyncio
async def test_record_evolution_completes_appointment(
    client: AsyncClient,
    receptionist_headers: dict,
    physician_headers: dict,
    booking: dict,
    patient: dict,
) -> None:
    first = await in_progress_appointment(
        client, receptionist_headers, physician_headers, booking
    )

    denied = await client.post(
        "/api/v1/evolutions",
        json={"appointment_id": first, "assessment": "Flu"},
        headers=receptionist_headers,
    )
    assert denied.status_code == 403

    response = await client.post(
        "/api/v1/evolutions",
        json={"appointment_id": first, "assessment": "Flu", "prescription": "Rest"},
        headers=physician_headers,
    )
    assert response.status_code == 201
    assert response.json()["patient_id"] == patient["id"]

    appointment = await client.get(f"/api/v1/appointments/{first}", headers=physician_headers)
    assert appointment.json()["status"] == "completed"

    again = await client.post(
        "/api/v1/evolutions",
        json={"appointment_id": first, "assessment": "Flu"},
        headers=physician_headers,
    )
    assert again.status_code == 400

    second = await in_progress_appointment(
        client, receptionist_headers, physician_headers, booking
    )
    await client.post(
        "/api/v1/evolutions",
        json={"appointment_id": second, "assessment": "Recovered"},
        headers=physician_headers,
    )

    history = await client.get(
        f"/api/v1/evolutions/patient/{patient['id']}", headers=physician_headers
    )
    assert [e["assessment"] for e in history.json()] == ["Recovered", "Flu"]


@pytest.mark.asyncio
async def test_evolution_requires_consultation_in_progress(
    client: AsyncClient,
    receptionist_headers: dict,
    physician_headers: dict,
    booking: dict,
) -> None:
    created = await client.post("/api/v1/appointments", json=booking, headers=receptionist_headers)

    response = await client.post(
        "/api/v1/evolutions",
        json={"appointment_id": created.json()["id"], "assessment": "Flu"},
        headers=physician_headers,
    )
    assert response.status_code == 400

    missing = await client.get(
        f"/api/v1/evolutions/appointment/{created.json()['id']}", headers=physician_headers
    )
    assert missing.status_code == 404
