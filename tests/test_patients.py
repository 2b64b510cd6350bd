"""Tests for patient endpoints."""

import pytest
from httpx import AsyncClient

from clinic.services.patient_service import QUICK_REGISTRATION_NOTE


@pytest.fixture
def patient_data() -> dict:
    return {
        "name": "  Ana Costa  ",
        "email": "ana.costa@clinic.com",
        "phone": "+5511912345678",
        "birth_date": "1990-08-21",
        "gender": "female",
        "profession": "Engineer",
    }


@pytest.mark.asyncio
async def test_create_patient(
    client: AsyncClient, receptionist_headers: dict, receptionist_user: dict, patient_data: dict
) -> None:
    response = await client.post(
        "/api/v1/patients", json=patient_data, headers=receptionist_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Ana Costa"
    assert data["needs_completion"] is False
    assert data["created_by"] == receptionist_user["id"]


@pytest.mark.asyncio
async def test_create_patient_validation(
    client: AsyncClient, receptionist_headers: dict, patient_data: dict
) -> None:
    response = await client.post(
        "/api/v1/patients", json={**patient_data, "name": "  a "}, headers=receptionist_headers
    )

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_quick_registration_is_completed_by_update(
    client: AsyncClient, receptionist_headers: dict
) -> None:
    quick = await client.post(
        "/api/v1/patients/quick", json={"name": "Pedro Lima"}, headers=receptionist_headers
    )
    assert quick.status_code == 201
    created = quick.json()
    assert created["needs_completion"] is True
    assert created["observations"] == QUICK_REGISTRATION_NOTE

    url = f"/api/v1/patients/{created['id']}"
    partial = await client.put(url, json={"phone": "+5511933334444"}, headers=receptionist_headers)
    assert partial.json()["needs_completion"] is True

    completed = await client.put(
        url, json={"birth_date": "1979-01-30", "gender": "male"}, headers=receptionist_headers
    )
    assert completed.status_code == 200
    assert completed.json()["needs_completion"] is False
    assert completed.json()["gender"] == "male"


@pytest.mark.asyncio
async def test_list_and_get_patients(
    client: AsyncClient, physician_headers: dict, patient: dict
) -> None:
    listing = await client.get("/api/v1/patients", headers=physician_headers)
    assert [p["id"] for p in listing.json()] == [patient["id"]]

    detail = await client.get(f"/api/v1/patients/{patient['id']}", headers=physician_headers)
    assert detail.json()["birth_date"] == "1985-03-14"

    missing = await client.get("/api/v1/patients/999", headers=physician_headers)
    assert missing.status_code == 404
