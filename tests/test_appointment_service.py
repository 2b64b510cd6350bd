"""Tests for the appointment lifecycle over the in-memory store."""

from datetime import datetime

import pytest

from clinic.core.exceptions import (
    ConflictException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)
from clinic.repositories.memory import InMemoryAppointmentRepository, InMemoryClinicDirectory
from clinic.schemas.appointments import AppointmentCreate, AppointmentStatusUpdate
from clinic.schemas.auth import Actor
from clinic.schemas.common import UserRole
from clinic.schemas.evolutions import EvolutionContent, EvolutionCreate
from clinic.services.appointment_service import AppointmentService

BOOKED_AT = datetime(2024, 6, 1, 9, 0)
CREATED_AT = datetime(2024, 5, 20, 14, 0)

OWNER = Actor(user_id=10, role=UserRole.PHYSICIAN, professional_id=3)
OTHER_PHYSICIAN = Actor(user_id=11, role=UserRole.PHYSICIAN, professional_id=9)
RECEPTIONIST = Actor(user_id=20, role=UserRole.RECEPTIONIST)


class FixedClock:
    """Clock returning a settable naive UTC time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _professional(professional_id: int, user_id: int, name: str) -> dict:
    return {
        "id": professional_id,
        "user_id": user_id,
        "specialty": "General practice",
        "commission": 30.0,
        "user": {
            "id": user_id,
            "name": name,
            "email": f"user{user_id}@clinic.com",
            "role": "physician",
        },
    }


@pytest.fixture
def directory() -> InMemoryClinicDirectory:
    return InMemoryClinicDirectory(
        patients={
            7: {
                "id": 7,
                "name": "Maria Silva",
                "phone": "+5511999990000",
                "gender": "female",
                "created_by": 20,
                "needs_completion": False,
                "created_at": CREATED_AT,
                "updated_at": CREATED_AT,
            },
            8: {
                "id": 8,
                "name": "Joao Souza",
                "gender": "other",
                "created_by": 20,
                "needs_completion": True,
                "created_at": CREATED_AT,
                "updated_at": CREATED_AT,
            },
        },
        professionals={
            3: _professional(3, 10, "Gregory House"),
            9: _professional(9, 11, "James Wilson"),
        },
        procedures={
            1: {"id": 1, "name": "Consultation", "type": "consultation", "value": 150.0},
            2: {"id": 2, "name": "Blood count", "type": "exam", "value": 40.0},
        },
    )


@pytest.fixture
def repository(directory: InMemoryClinicDirectory) -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository(procedures=directory.procedures)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(CREATED_AT)


@pytest.fixture
def service(repository, directory, clock) -> AppointmentService:
    return AppointmentService(repository, directory, clock=clock)


def booking(**overrides) -> AppointmentCreate:
    data = {"patient_id": 7, "professional_id": 3, "date": BOOKED_AT, "procedure_ids": [1]}
    data.update(overrides)
    return AppointmentCreate(**data)


@pytest.mark.asyncio
async def test_create_appointment_is_scheduled(service: AppointmentService):
    created = await service.create_appointment(booking())

    assert created.status == "scheduled"
    assert created.date == BOOKED_AT
    assert created.scheduled_at == BOOKED_AT
    assert created.checked_in_at is None
    assert created.patient.name == "Maria Silva"
    assert created.professional.user.name == "Gregory House"
    assert [p.id for p in created.procedures] == [1]
    assert created.version == 1


@pytest.mark.asyncio
async def test_create_accepts_aware_timestamps(service: AppointmentService):
    created = await service.create_appointment(booking(date="2024-06-01T06:00:00-03:00"))
    assert created.scheduled_at == BOOKED_AT


@pytest.mark.asyncio
async def test_create_without_procedures_conflicts_and_stores_nothing(
    service: AppointmentService, repository: InMemoryAppointmentRepository
):
    with pytest.raises(ConflictException):
        await service.create_appointment(booking(procedure_ids=[]))

    assert repository.appointments == {}
    assert repository.appointment_procedures == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"professional_id": 99}, {"patient_id": 99}, {"procedure_ids": [1, 99]}],
)
async def test_create_with_unknown_reference_is_not_found(
    service: AppointmentService, repository: InMemoryAppointmentRepository, overrides: dict
):
    with pytest.raises(NotFoundException):
        await service.create_appointment(booking(**overrides))

    assert repository.appointments == {}


@pytest.mark.asyncio
async def test_create_ignores_repeated_procedures(
    service: AppointmentService, repository: InMemoryAppointmentRepository
):
    created = await service.create_appointment(booking(procedure_ids=[2, 1, 2]))

    assert [p.id for p in created.procedures] == [2, 1]
    assert repository.appointment_procedures == [(created.id, 2), (created.id, 1)]


@pytest.mark.asyncio
async def test_provisional_booking_is_pending(service: AppointmentService):
    created = await service.create_appointment(
        booking(patient_id=None, patient_name="Walk-in", patient_phone="+5511988887777")
    )

    assert created.patient_id is None
    assert created.patient is None
    assert created.is_pending
    assert created.patient_name == "Walk-in"


@pytest.mark.asyncio
async def test_check_in_moves_queue_timestamp_to_arrival(
    service: AppointmentService, clock: FixedClock
):
    created = await service.create_appointment(booking())

    clock.now = datetime(2024, 6, 1, 9, 5)
    waiting = await service.check_in(created.id, RECEPTIONIST)

    assert waiting.status == "waiting"
    assert waiting.checked_in_at == clock.now
    assert waiting.scheduled_at == BOOKED_AT
    assert waiting.date >= created.date
    assert waiting.model_dump(mode="json")["date"] == "2024-06-01T09:05:00.000Z"
    assert waiting.version == 2


@pytest.mark.asyncio
async def test_timestamps_render_with_millisecond_precision(
    service: AppointmentService, clock: FixedClock
):
    created = await service.create_appointment(booking())

    clock.now = datetime(2024, 6, 1, 9, 5, 3, 123456)
    waiting = await service.check_in(created.id, RECEPTIONIST)

    rendered = waiting.model_dump(mode="json")
    assert rendered["date"] == "2024-06-01T09:05:03.123Z"
    assert rendered["checked_in_at"] == "2024-06-01T09:05:03.123Z"
    assert rendered["scheduled_at"] == "2024-06-01T09:00:00.000Z"


@pytest.mark.asyncio
async def test_check_in_twice_is_invalid(service: AppointmentService):
    created = await service.create_appointment(booking())
    await service.check_in(created.id, RECEPTIONIST)

    with pytest.raises(InvalidTransitionException):
        await service.check_in(created.id, RECEPTIONIST)


@pytest.mark.asyncio
async def test_only_assigned_physician_can_start(service: AppointmentService):
    created = await service.create_appointment(booking())
    await service.check_in(created.id, RECEPTIONIST)

    with pytest.raises(ForbiddenException):
        await service.start(created.id, OTHER_PHYSICIAN)

    started = await service.start(created.id, OWNER)
    assert started.status == "in_progress"


@pytest.mark.asyncio
async def test_start_requires_check_in(service: AppointmentService):
    created = await service.create_appointment(booking())

    with pytest.raises(InvalidTransitionException):
        await service.start(created.id, OWNER)

    stored = await service.get_appointment(created.id)
    assert stored["status"] == "scheduled"


@pytest.mark.asyncio
async def test_unknown_status_is_invalid(service: AppointmentService):
    created = await service.create_appointment(booking())

    with pytest.raises(InvalidTransitionException):
        await service.update_status(
            created.id, AppointmentStatusUpdate(status="archived"), RECEPTIONIST
        )


@pytest.mark.asyncio
async def test_cancel_records_timestamp_and_notes(service: AppointmentService, clock: FixedClock):
    created = await service.create_appointment(booking())

    clock.now = datetime(2024, 5, 31, 18, 0)
    cancelled = await service.update_status(
        created.id,
        AppointmentStatusUpdate(status="cancelled", notes="Patient called to cancel"),
        RECEPTIONIST,
    )

    assert cancelled.status == "cancelled"
    assert cancelled.cancelled_at == clock.now
    assert cancelled.notes == "Patient called to cancel"


@pytest.mark.asyncio
async def test_completion_writes_evolution(
    service: AppointmentService, repository: InMemoryAppointmentRepository
):
    created = await service.create_appointment(booking())
    await service.check_in(created.id, RECEPTIONIST)
    await service.start(created.id, OWNER)

    completed = await service.update_status(
        created.id,
        AppointmentStatusUpdate(
            status="completed",
            evolution=EvolutionContent(subjective="Headache", plan="Rest"),
        ),
        OWNER,
    )

    assert completed.status == "completed"
    assert completed.completed_at is not None
    [evolution] = repository.evolutions.values()
    assert evolution["appointment_id"] == created.id
    assert evolution["patient_id"] == 7
    assert evolution["professional_id"] == 3
    assert evolution["subjective"] == "Headache"


@pytest.mark.asyncio
async def test_record_evolution_completes_appointment(service: AppointmentService):
    created = await service.create_appointment(booking())
    await service.check_in(created.id, RECEPTIONIST)
    await service.start(created.id, OWNER)

    evolution = await service.record_evolution(
        EvolutionCreate(appointment_id=created.id, assessment="Migraine"), OWNER
    )

    assert evolution.assessment == "Migraine"
    stored = await service.get_appointment(created.id)
    assert stored["status"] == "completed"


@pytest.mark.asyncio
async def test_completion_needs_bound_patient(
    service: AppointmentService, repository: InMemoryAppointmentRepository
):
    created = await service.create_appointment(booking(patient_id=None, patient_name="Walk-in"))
    await service.check_in(created.id, RECEPTIONIST)
    await service.start(created.id, OWNER)

    with pytest.raises(ConflictException):
        await service.update_status(created.id, AppointmentStatusUpdate(status="completed"), OWNER)

    assert repository.evolutions == {}
    stored = await service.get_appointment(created.id)
    assert stored["status"] == "in_progress"


@pytest.mark.asyncio
async def test_complete_patient_info_binds_once(service: AppointmentService):
    created = await service.create_appointment(booking(patient_id=None, patient_name="Walk-in"))

    bound = await service.complete_patient_info(created.id, 7)
    assert bound.patient_id == 7
    assert bound.patient.name == "Maria Silva"
    assert not bound.is_pending

    with pytest.raises(ConflictException):
        await service.complete_patient_info(created.id, 8)

    stored = await service.get_appointment(created.id)
    assert stored["patient_id"] == 7


@pytest.mark.asyncio
async def test_complete_patient_info_unknown_patient(service: AppointmentService):
    created = await service.create_appointment(booking(patient_id=None))

    with pytest.raises(NotFoundException):
        await service.complete_patient_info(created.id, 99)


@pytest.mark.asyncio
async def test_missing_appointment_is_not_found(service: AppointmentService):
    with pytest.raises(NotFoundException):
        await service.check_in(404, RECEPTIONIST)


@pytest.mark.asyncio
async def test_stale_version_is_rejected(
    service: AppointmentService, repository: InMemoryAppointmentRepository
):
    created = await service.create_appointment(booking())
    await service.check_in(created.id, RECEPTIONIST)

    with pytest.raises(ConflictException):
        await repository.update_status(created.id, created.version, {"status": "cancelled"})

    stored = await service.get_appointment(created.id)
    assert stored["status"] == "waiting"


@pytest.mark.asyncio
async def test_physician_lists_only_own_appointments(service: AppointmentService):
    await service.create_appointment(booking())
    await service.create_appointment(booking(professional_id=9))

    own = await service.list_appointments(OWNER)
    everything = await service.list_appointments(RECEPTIONIST)

    assert {a.professional_id for a in own} == {3}
    assert len(everything) == 2
