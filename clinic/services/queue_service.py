"""Waiting queue projection.

The queue is not stored anywhere: every call reads the appointment store and
recomputes the filtered, enriched view for one clinic day.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from clinic.config import Settings
from clinic.core.clock import day_window, local_today, utc_now
from clinic.core.exceptions import BadRequestException
from clinic.core.redis_client import CacheManager
from clinic.repositories.ports import AppointmentRepository, ClinicDirectory
from clinic.repositories.sql import SqlAppointmentRepository, SqlClinicDirectory
from clinic.schemas.appointments import ACTIVE_STATUSES, AppointmentStatus, QueueEntry
from clinic.schemas.auth import Actor
from clinic.schemas.common import ProcedureType
from clinic.schemas.queue import QueueFilters
from clinic.services.appointment_service import enrich_appointments

# Filter value meaning "no filter"
ALL = "all"

_WAITING_STATES = frozenset({AppointmentStatus.WAITING.value, AppointmentStatus.IN_PROGRESS.value})


@dataclass(frozen=True)
class QueuePolicy:
    """Defaults applied when a queue filter is left unset.

    Attributes:
        default_statuses: Statuses shown when no status filter is given
        physician_scope: ``all`` shows every professional when none is given;
            ``self`` narrows a physician's queue to their own appointments
        timezone: IANA zone that defines the clinic day
    """

    default_statuses: frozenset[str] = frozenset(status.value for status in ACTIVE_STATUSES)
    physician_scope: str = ALL
    timezone: str = "UTC"

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueuePolicy":
        """Build the policy from application settings."""
        return cls(
            physician_scope=settings.queue_physician_scope,
            timezone=settings.clinic_timezone,
        )


def wait_minutes(appointment: dict, now: datetime) -> int | None:
    """Minutes since check-in for patients in the waiting room or in consultation."""
    if appointment["status"] not in _WAITING_STATES or appointment["checked_in_at"] is None:
        return None
    return max(0, int((now - appointment["checked_in_at"]).total_seconds() // 60))


class QueueService:
    """Service computing the waiting queue."""

    def __init__(
        self,
        repository: AppointmentRepository,
        directory: ClinicDirectory,
        policy: QueuePolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize service with its store, directory, policy and clock."""
        self.repository = repository
        self.directory = directory
        self.policy = policy or QueuePolicy()
        self.clock = clock

    @classmethod
    def from_session(
        cls,
        db: AsyncSession,
        policy: QueuePolicy,
        cache_manager: CacheManager | None = None,
    ) -> "QueueService":
        """Build the service over the SQL store."""
        return cls(SqlAppointmentRepository(db), SqlClinicDirectory(db, cache_manager), policy)

    def _statuses(self, requested: str | None) -> frozenset[str]:
        if not requested or requested == ALL:
            return self.policy.default_statuses
        try:
            return frozenset({AppointmentStatus(requested).value})
        except ValueError:
            raise BadRequestException(f"Unknown status filter '{requested}'") from None

    def _procedure_type(self, requested: str | None) -> str | None:
        if not requested or requested == ALL:
            return None
        try:
            return ProcedureType(requested).value
        except ValueError:
            raise BadRequestException(f"Unknown procedure type filter '{requested}'") from None

    def _professional_id(self, requested: int | None, actor: Actor) -> int | None:
        if requested is not None:
            return requested
        if self.policy.physician_scope == "self" and actor.is_physician:
            return actor.professional_id
        return None

    async def queue(self, filters: QueueFilters, actor: Actor) -> list[QueueEntry]:
        """
        Compute the queue for one clinic day.

        Args:
            filters: Optional professional, day, status and procedure type filters
            actor: Requesting user

        Returns:
            Enriched appointments ordered by queue timestamp (arrival time once
            checked in), then by ID

        Raises:
            BadRequestException: If a status or type filter value is unknown
        """
        now = self.clock()
        statuses = self._statuses(filters.status)
        procedure_type = self._procedure_type(filters.type)
        professional_id = self._professional_id(filters.professional_id, actor)

        day = filters.date or local_today(self.policy.timezone, now)
        window = day_window(day, self.policy.timezone)

        records = await self.repository.list_by_filter(window, statuses, professional_id)
        enriched = await enrich_appointments(records, self.repository, self.directory)

        if procedure_type:
            enriched = [
                item
                for item in enriched
                if any(procedure["type"] == procedure_type for procedure in item["procedures"])
            ]

        return [
            QueueEntry.model_validate({**item, "wait_minutes": wait_minutes(item, now)})
            for item in enriched
        ]
