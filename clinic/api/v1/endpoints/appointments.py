"""Appointment endpoints."""

import datetime as dt

from fastapi import APIRouter, Depends, Query, status

from clinic.dependencies import (
    CacheManagerDep,
    CurrentActor,
    DatabaseSession,
    QueuePolicyDep,
    require_roles,
)
from clinic.schemas.appointments import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    CompletePatientInfo,
    QueueEntry,
)
from clinic.schemas.common import UserRole
from clinic.schemas.queue import QueueFilters
from clinic.services.appointment_service import AppointmentService
from clinic.services.queue_service import QueueService

router = APIRouter()


@router.post(
    "",
    response_model=AppointmentDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> AppointmentDetail:
    """
    Book an appointment with one or more procedures.

    Args:
        data: Appointment creation data
        actor: Authenticated user
        db: Database session
        cache_manager: Optional procedure cache

    Returns:
        Created appointment with status ``scheduled``

    Raises:
        NotFoundException: If the patient, professional or a procedure is unknown
        ConflictException: If no procedure was selected
    """
    service = AppointmentService.from_session(db, cache_manager)
    return await service.create_appointment(data)


@router.get(
    "",
    response_model=list[AppointmentDetail],
    summary="List appointments",
)
async def list_appointments(
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    date: dt.date | None = Query(None, description="Clinic day (YYYY-MM-DD)"),
) -> list[AppointmentDetail]:
    """
    List appointments, optionally for one clinic day.

    Physicians only see appointments assigned to them.
    """
    service = AppointmentService.from_session(db, cache_manager)
    return await service.list_appointments(actor, date)


@router.get(
    "/waiting-queue",
    response_model=list[QueueEntry],
    summary="Patients waiting today",
)
async def waiting_queue(
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    policy: QueuePolicyDep,
    professional_id: int | None = Query(None),
    date: dt.date | None = Query(None),
) -> list[QueueEntry]:
    """Queue restricted to patients already checked in and waiting."""
    service = QueueService.from_session(db, policy, cache_manager)
    filters = QueueFilters(
        professional_id=professional_id,
        date=date,
        status=AppointmentStatus.WAITING.value,
    )
    return await service.queue(filters, actor)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentDetail,
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: int,
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> AppointmentDetail:
    """
    Get appointment with patient, professional and procedures.

    Raises:
        NotFoundException: If appointment not found
    """
    service = AppointmentService.from_session(db, cache_manager)
    return await service.get_appointment_detail(appointment_id)


@router.post(
    "/{appointment_id}/check-in",
    response_model=AppointmentResponse,
    summary="Check in a scheduled appointment",
)
async def check_in(
    appointment_id: int,
    actor: CurrentActor,
    db: DatabaseSession,
) -> AppointmentResponse:
    """
    Mark the patient as arrived.

    The appointment moves to ``waiting`` and its queue timestamp becomes the
    arrival time.

    Raises:
        NotFoundException: If appointment not found
        InvalidTransitionException: If the appointment is not scheduled
    """
    service = AppointmentService.from_session(db)
    return await service.check_in(appointment_id, actor)


@router.post(
    "/{appointment_id}/start",
    response_model=AppointmentResponse,
    summary="Start the consultation",
)
async def start_consultation(
    appointment_id: int,
    actor: CurrentActor,
    db: DatabaseSession,
) -> AppointmentResponse:
    """
    Move a waiting appointment to ``in_progress``.

    Raises:
        ForbiddenException: If the caller is not the assigned physician
        InvalidTransitionException: If the patient is not waiting
    """
    service = AppointmentService.from_session(db)
    return await service.start(appointment_id, actor)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    summary="Change appointment status",
)
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    actor: CurrentActor,
    db: DatabaseSession,
) -> AppointmentResponse:
    """
    Generic status change.

    Completing requires the appointment to be in progress and writes the
    evolution sent in ``evolution``.

    Raises:
        InvalidTransitionException: Unknown status or disallowed transition
        ForbiddenException: Role or ownership check failed
        ConflictException: The appointment changed concurrently
    """
    service = AppointmentService.from_session(db)
    return await service.update_status(appointment_id, data, actor)


@router.post(
    "/{appointment_id}/complete-patient-info",
    response_model=AppointmentDetail,
    summary="Bind a patient to a provisional booking",
    dependencies=[Depends(require_roles(UserRole.RECEPTIONIST, UserRole.ADMIN))],
)
async def complete_patient_info(
    appointment_id: int,
    data: CompletePatientInfo,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> AppointmentDetail:
    """
    Attach a registered patient to an appointment booked without one.

    Raises:
        NotFoundException: If the appointment or the patient does not exist
        ConflictException: If the appointment already has a patient
    """
    service = AppointmentService.from_session(db, cache_manager)
    return await service.complete_patient_info(appointment_id, data.patient_id)
