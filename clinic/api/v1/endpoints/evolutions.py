"""Evolution (SOAP note) endpoints."""

from fastapi import APIRouter, Depends, status

from clinic.dependencies import CacheManagerDep, CurrentActor, DatabaseSession, require_roles
from clinic.schemas.common import UserRole
from clinic.schemas.evolutions import EvolutionCreate, EvolutionDetail, EvolutionResponse
from clinic.services.appointment_service import AppointmentService
from clinic.services.evolution_service import EvolutionService

router = APIRouter(prefix="/evolutions")


@router.post(
    "",
    response_model=EvolutionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record the evolution and complete the appointment",
    dependencies=[Depends(require_roles(UserRole.PHYSICIAN))],
)
async def create_evolution(
    data: EvolutionCreate,
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> EvolutionResponse:
    """
    Write the SOAP note of an in-progress consultation.

    The appointment is completed in the same transaction.

    Raises:
        ForbiddenException: If the caller is not the assigned physician
        InvalidTransitionException: If the consultation is not in progress
    """
    service = AppointmentService.from_session(db, cache_manager)
    return await service.record_evolution(data, actor)


@router.get("/appointment/{appointment_id}", response_model=EvolutionDetail)
async def get_appointment_evolution(
    appointment_id: int,
    actor: CurrentActor,
    db: DatabaseSession,
):
    """Get the evolution written for an appointment."""
    return await EvolutionService(db).get_by_appointment(appointment_id)


@router.get("/patient/{patient_id}", response_model=list[EvolutionDetail])
async def list_patient_evolutions(patient_id: int, actor: CurrentActor, db: DatabaseSession):
    """List a patient's evolutions, newest first."""
    return await EvolutionService(db).list_by_patient(patient_id)
