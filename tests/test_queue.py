"""Tests for the waiting queue projection."""

from datetime import date, datetime

import pytest

from clinic.core.exceptions import BadRequestException
from clinic.repositories.memory import InMemoryAppointmentRepository, InMemoryClinicDirectory
from clinic.schemas.auth import Actor
from clinic.schemas.common import UserRole
from clinic.schemas.queue import QueueFilters
from clinic.services.queue_service import QueuePolicy, QueueService, wait_minutes

DAY = date(2024, 6, 1)
NOW = datetime(2024, 6, 1, 10, 0)

OWNER = Actor(user_id=10, role=UserRole.PHYSICIAN, professional_id=3)
RECEPTIONIST = Actor(user_id=20, role=UserRole.RECEPTIONIST)

PROCEDURES = {
    1: {"id": 1, "name": "Consultation", "type": "consultation", "value": 150.0},
    2: {"id": 2, "name": "Blood count", "type": "exam", "value": 40.0},
}


@pytest.fixture
def repository() -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository(procedures=PROCEDURES)


@pytest.fixture
def directory() -> InMemoryClinicDirectory:
    return InMemoryClinicDirectory(
        professionals={
            3: {"id": 3, "user_id": 10, "specialty": "Clinic", "commission": 30.0, "user": None},
            9: {"id": 9, "user_id": 11, "specialty": "Oncology", "commission": 20.0, "user": None},
        },
        procedures=PROCEDURES,
    )


def queue_service(repository, directory, **policy) -> QueueService:
    return QueueService(repository, directory, QueuePolicy(**policy), clock=lambda: NOW)


async def add(
    repository: InMemoryAppointmentRepository,
    scheduled_at: datetime,
    status: str = "scheduled",
    checked_in_at: datetime | None = None,
    professional_id: int = 3,
    procedure_ids: tuple[int, ...] = (1,),
) -> int:
    record = await repository.create(
        {
            "professional_id": professional_id,
            "scheduled_at": scheduled_at,
            "checked_in_at": checked_in_at,
            "status": status,
            "created_at": scheduled_at,
            "updated_at": scheduled_at,
        },
        list(procedure_ids),
    )
    return record["id"]


@pytest.mark.asyncio
async def test_default_queue_shows_active_statuses_of_the_day(repository, directory):
    scheduled = await add(repository, datetime(2024, 6, 1, 11, 0))
    waiting = await add(
        repository, datetime(2024, 6, 1, 9, 0), "waiting", checked_in_at=datetime(2024, 6, 1, 9, 5)
    )
    in_progress = await add(
        repository,
        datetime(2024, 6, 1, 8, 0),
        "in_progress",
        checked_in_at=datetime(2024, 6, 1, 8, 10),
    )
    await add(repository, datetime(2024, 6, 1, 7, 0), "completed")
    await add(repository, datetime(2024, 6, 1, 7, 30), "cancelled")
    await add(repository, datetime(2024, 6, 2, 9, 0))

    entries = await queue_service(repository, directory).queue(
        QueueFilters(date=DAY), RECEPTIONIST
    )

    assert [entry.id for entry in entries] == [in_progress, waiting, scheduled]


@pytest.mark.asyncio
async def test_status_filter_selects_one_status(repository, directory):
    await add(repository, datetime(2024, 6, 1, 9, 0))
    completed = await add(repository, datetime(2024, 6, 1, 8, 0), "completed")
    service = queue_service(repository, directory)

    entries = await service.queue(QueueFilters(date=DAY, status="completed"), RECEPTIONIST)
    assert [entry.id for entry in entries] == [completed]

    everything_active = await service.queue(QueueFilters(date=DAY, status="all"), RECEPTIONIST)
    assert completed not in [entry.id for entry in everything_active]


@pytest.mark.asyncio
async def test_unknown_filter_values_are_rejected(repository, directory):
    service = queue_service(repository, directory)

    with pytest.raises(BadRequestException):
        await service.queue(QueueFilters(date=DAY, status="lost"), RECEPTIONIST)

    with pytest.raises(BadRequestException):
        await service.queue(QueueFilters(date=DAY, type="surgery"), RECEPTIONIST)


@pytest.mark.asyncio
async def test_type_filter_matches_any_procedure(repository, directory):
    consultation_only = await add(repository, datetime(2024, 6, 1, 9, 0), procedure_ids=(1,))
    with_exam = await add(repository, datetime(2024, 6, 1, 9, 30), procedure_ids=(1, 2))
    service = queue_service(repository, directory)

    exams = await service.queue(QueueFilters(date=DAY, type="exam"), RECEPTIONIST)
    assert [entry.id for entry in exams] == [with_exam]

    everything = await service.queue(QueueFilters(date=DAY, type="all"), RECEPTIONIST)
    assert [entry.id for entry in everything] == [consultation_only, with_exam]


@pytest.mark.asyncio
async def test_check_in_order_beats_booking_order(repository, directory):
    early_booking_late_arrival = await add(
        repository,
        datetime(2024, 6, 1, 8, 0),
        "waiting",
        checked_in_at=datetime(2024, 6, 1, 9, 40),
    )
    late_booking_early_arrival = await add(
        repository,
        datetime(2024, 6, 1, 9, 0),
        "waiting",
        checked_in_at=datetime(2024, 6, 1, 8, 50),
    )

    entries = await queue_service(repository, directory).queue(
        QueueFilters(date=DAY, status="waiting"), RECEPTIONIST
    )

    assert [entry.id for entry in entries] == [
        late_booking_early_arrival,
        early_booking_late_arrival,
    ]
    assert [entry.wait_minutes for entry in entries] == [70, 20]


@pytest.mark.asyncio
async def test_professional_filter(repository, directory):
    await add(repository, datetime(2024, 6, 1, 9, 0), professional_id=3)
    other = await add(repository, datetime(2024, 6, 1, 9, 0), professional_id=9)

    entries = await queue_service(repository, directory).queue(
        QueueFilters(date=DAY, professional_id=9), OWNER
    )

    assert [entry.id for entry in entries] == [other]
    assert entries[0].professional.specialty == "Oncology"


@pytest.mark.asyncio
async def test_physician_scope_policy(repository, directory):
    own = await add(repository, datetime(2024, 6, 1, 9, 0), professional_id=3)
    await add(repository, datetime(2024, 6, 1, 9, 30), professional_id=9)

    shared = await queue_service(repository, directory).queue(QueueFilters(date=DAY), OWNER)
    assert len(shared) == 2

    scoped_service = queue_service(repository, directory, physician_scope="self")
    scoped = await scoped_service.queue(QueueFilters(date=DAY), OWNER)
    assert [entry.id for entry in scoped] == [own]

    front_desk = await scoped_service.queue(QueueFilters(date=DAY), RECEPTIONIST)
    assert len(front_desk) == 2


@pytest.mark.asyncio
async def test_day_follows_clinic_timezone(repository, directory):
    # 22:00 on June 1st in Sao Paulo is 01:00 UTC on June 2nd
    evening = await add(repository, datetime(2024, 6, 2, 1, 0))
    # 23:00 UTC on May 31st is 20:00 in Sao Paulo, the previous local day
    await add(repository, datetime(2024, 5, 31, 23, 0))

    service = queue_service(repository, directory, timezone="America/Sao_Paulo")
    entries = await service.queue(QueueFilters(date=DAY), RECEPTIONIST)

    assert [entry.id for entry in entries] == [evening]


@pytest.mark.asyncio
async def test_date_defaults_to_today(repository, directory):
    today = await add(repository, datetime(2024, 6, 1, 11, 0))
    await add(repository, datetime(2024, 5, 31, 11, 0))

    entries = await queue_service(repository, directory).queue(QueueFilters(), RECEPTIONIST)

    assert [entry.id for entry in entries] == [today]


def test_wait_minutes_only_for_checked_in_patients():
    arrived = datetime(2024, 6, 1, 9, 15)

    assert wait_minutes({"status": "waiting", "checked_in_at": arrived}, NOW) == 45
    assert wait_minutes({"status": "in_progress", "checked_in_at": arrived}, NOW) == 45
    assert wait_minutes({"status": "scheduled", "checked_in_at": None}, NOW) is None
    assert wait_minutes({"status": "completed", "checked_in_at": arrived}, NOW) is None
