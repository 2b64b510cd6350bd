"""Patient endpoints."""

from fastapi import APIRouter, status

from clinic.dependencies import CurrentUser, DatabaseSession
from clinic.schemas.patients import (
    PatientCreate,
    PatientQuickCreate,
    PatientResponse,
    PatientUpdate,
)
from clinic.services.patient_service import PatientService

router = APIRouter(prefix="/patients")


@router.get("", response_model=list[PatientResponse])
async def list_patients(db: DatabaseSession, current_user: CurrentUser):
    """List patients ordered by name."""
    return await PatientService().list_patients(db)


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(data: PatientCreate, db: DatabaseSession, current_user: CurrentUser):
    """Register a patient with the full record."""
    return await PatientService().create_patient(db, data, created_by=current_user["id"])


@router.post("/quick", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def quick_create_patient(
    data: PatientQuickCreate,
    db: DatabaseSession,
    current_user: CurrentUser,
):
    """
    Register a walk-in patient with only a name.

    The patient is flagged ``needs_completion`` until the remaining data is
    filled in, usually at check-in.
    """
    return await PatientService().quick_create_patient(db, data, created_by=current_user["id"])


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(patient_id: int, db: DatabaseSession, current_user: CurrentUser):
    """Get patient by ID."""
    return await PatientService().get_patient(db, patient_id)


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: int,
    data: PatientUpdate,
    db: DatabaseSession,
    current_user: CurrentUser,
):
    """Update a patient."""
    return await PatientService().update_patient(db, patient_id, data)
