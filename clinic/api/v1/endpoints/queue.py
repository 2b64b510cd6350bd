"""Waiting queue endpoint."""

import datetime as dt

from fastapi import APIRouter, Query

from clinic.dependencies import CacheManagerDep, CurrentActor, DatabaseSession, QueuePolicyDep
from clinic.schemas.appointments import QueueEntry
from clinic.schemas.queue import QueueFilters
from clinic.services.queue_service import QueueService

router = APIRouter()


@router.get("/queue", response_model=list[QueueEntry], summary="Waiting queue")
async def get_queue(
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    policy: QueuePolicyDep,
    professional_id: int | None = Query(None),
    date: dt.date | None = Query(None, description="Clinic day, defaults to today"),
    status: str | None = Query(None, description="Appointment status or 'all'"),
    type: str | None = Query(None, description="Procedure type or 'all'"),
) -> list[QueueEntry]:
    """
    Compute the queue for one clinic day.

    Without a status filter the queue shows scheduled, waiting and in-progress
    appointments. Rows are ordered by arrival time once checked in, booked
    time before.

    Raises:
        BadRequestException: If a status or type filter value is unknown
    """
    filters = QueueFilters(professional_id=professional_id, date=date, status=status, type=type)
    service = QueueService.from_session(db, policy, cache_manager)
    return await service.queue(filters, actor)
