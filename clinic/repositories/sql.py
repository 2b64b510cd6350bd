"""SQLAlchemy Core implementations of the storage interfaces."""

from collections.abc import Collection
from typing import Any

from sqlalchemy import and_, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.config import settings
from clinic.core.clock import utc_now
from clinic.core.exceptions import ConflictException, NotFoundException
from clinic.core.redis_client import CacheManager
from clinic.models.appointments import appointment_procedures, appointments
from clinic.models.evolutions import evolutions
from clinic.models.patients import patients
from clinic.models.procedures import procedures
from clinic.models.professionals import professionals
from clinic.models.users import users
from clinic.repositories.ports import STALE_VERSION_MESSAGE, DayWindow

_queue_order = func.coalesce(appointments.c.checked_in_at, appointments.c.scheduled_at)


def procedure_cache_key(procedure_id: int) -> str:
    """Generate cache key for a procedure."""
    return f"procedure:{procedure_id}"


class SqlAppointmentRepository:
    """Appointment store backed by the ``appointments`` tables."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def get(self, appointment_id: int) -> dict | None:
        """Get appointment by ID, or None."""
        stmt = select(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def create(self, values: dict[str, Any], procedure_ids: list[int]) -> dict:
        """
        Insert an appointment and its procedure rows in one transaction.

        Args:
            values: Appointment column values
            procedure_ids: Procedures to link, already deduplicated

        Returns:
            Created appointment row
        """
        try:
            result = await self.db.execute(
                insert(appointments).values(**values).returning(appointments)
            )
            row = dict(result.mappings().one())
            await self.db.execute(
                insert(appointment_procedures),
                [{"appointment_id": row["id"], "procedure_id": pid} for pid in procedure_ids],
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return row

    async def _versioned_update(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
    ) -> dict:
        """Apply an update guarded by the version counter, without committing."""
        stmt = (
            update(appointments)
            .where(
                and_(
                    appointments.c.id == appointment_id,
                    appointments.c.version == expected_version,
                )
            )
            .values(**values, version=appointments.c.version + 1)
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        if row is None:
            await self.db.rollback()
            if await self.get(appointment_id) is None:
                raise NotFoundException("Appointment not found")
            raise ConflictException(STALE_VERSION_MESSAGE)

        return dict(row)

    async def update_status(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
    ) -> dict:
        """
        Write a status change if the row is still at ``expected_version``.

        Raises:
            NotFoundException: If appointment not found
            ConflictException: If the row was changed since it was read
        """
        row = await self._versioned_update(appointment_id, expected_version, values)
        await self.db.commit()
        return row

    async def complete(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
        evolution: dict[str, Any],
    ) -> tuple[dict, dict]:
        """
        Complete the appointment and insert its evolution in one transaction.

        Args:
            appointment_id: Appointment to complete
            expected_version: Version the caller read
            values: Status and side-effect columns
            evolution: Evolution column values

        Returns:
            Updated appointment row and created evolution row

        Raises:
            NotFoundException: If appointment not found
            ConflictException: If the row was changed since it was read
        """
        row = await self._versioned_update(appointment_id, expected_version, values)
        try:
            result = await self.db.execute(
                insert(evolutions).values(**evolution).returning(evolutions)
            )
            evolution_row = dict(result.mappings().one())
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return row, evolution_row

    async def bind_patient(
        self,
        appointment_id: int,
        patient_id: int,
        expected_version: int,
    ) -> dict:
        """Bind a patient to a pending appointment under the version check."""
        row = await self._versioned_update(
            appointment_id,
            expected_version,
            {"patient_id": patient_id, "is_pending": False, "updated_at": utc_now()},
        )
        await self.db.commit()
        return row

    async def _list(self, *conditions: Any) -> list[dict]:
        stmt = select(appointments).order_by(_queue_order, appointments.c.id)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list_by_professional(
        self,
        professional_id: int,
        window: DayWindow | None = None,
    ) -> list[dict]:
        """List a professional's appointments, optionally within a day window."""
        conditions = [appointments.c.professional_id == professional_id]
        if window:
            conditions.extend([_queue_order >= window[0], _queue_order <= window[1]])
        return await self._list(*conditions)

    async def list_all(self, window: DayWindow | None = None) -> list[dict]:
        """List appointments, optionally within a day window."""
        if window:
            return await self._list(_queue_order >= window[0], _queue_order <= window[1])
        return await self._list()

    async def list_by_filter(
        self,
        window: DayWindow,
        statuses: Collection[str] | None = None,
        professional_id: int | None = None,
    ) -> list[dict]:
        """List appointments in the window matching the status set and professional."""
        conditions = [_queue_order >= window[0], _queue_order <= window[1]]
        if statuses:
            conditions.append(appointments.c.status.in_(sorted(statuses)))
        if professional_id is not None:
            conditions.append(appointments.c.professional_id == professional_id)
        return await self._list(*conditions)

    async def procedures_for(self, appointment_ids: Collection[int]) -> dict[int, list[dict]]:
        """Group linked procedures by appointment ID."""
        grouped: dict[int, list[dict]] = {appointment_id: [] for appointment_id in appointment_ids}
        if not grouped:
            return grouped

        stmt = (
            select(appointment_procedures.c.appointment_id, procedures)
            .join(procedures, procedures.c.id == appointment_procedures.c.procedure_id)
            .where(appointment_procedures.c.appointment_id.in_(list(grouped)))
            .order_by(appointment_procedures.c.id)
        )
        result = await self.db.execute(stmt)
        for row in result.mappings().all():
            record = dict(row)
            grouped[record.pop("appointment_id")].append(record)
        return grouped


class SqlClinicDirectory:
    """Batch lookups of patients, professionals and procedures."""

    def __init__(self, db: AsyncSession, cache_manager: CacheManager | None = None):
        """Initialize directory with database session and optional cache."""
        self.db = db
        self.cache = cache_manager

    async def patients_by_ids(self, patient_ids: Collection[int]) -> dict[int, dict]:
        """Get patients keyed by ID."""
        ids = {pid for pid in patient_ids if pid is not None}
        if not ids:
            return {}
        result = await self.db.execute(select(patients).where(patients.c.id.in_(ids)))
        return {row["id"]: dict(row) for row in result.mappings().all()}

    async def professionals_by_ids(self, professional_ids: Collection[int]) -> dict[int, dict]:
        """Get professionals keyed by ID with their user summary."""
        ids = set(professional_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(professionals).where(professionals.c.id.in_(ids)))
        found = {row["id"]: dict(row) for row in result.mappings().all()}

        user_ids = {professional["user_id"] for professional in found.values()}
        user_rows = await self.db.execute(
            select(users.c.id, users.c.name, users.c.email, users.c.role).where(
                users.c.id.in_(user_ids)
            )
        )
        users_by_id = {row["id"]: dict(row) for row in user_rows.mappings().all()}

        for professional in found.values():
            professional["user"] = users_by_id.get(professional["user_id"])
        return found

    async def procedures_by_ids(self, procedure_ids: Collection[int]) -> dict[int, dict]:
        """Get procedures keyed by ID, reading the cache first."""
        found: dict[int, dict] = {}
        missing = set(procedure_ids)

        # Try cache first
        if self.cache:
            for procedure_id in list(missing):
                cached = self.cache.get_json(procedure_cache_key(procedure_id))
                if cached:
                    found[procedure_id] = cached
                    missing.discard(procedure_id)

        if missing:
            result = await self.db.execute(select(procedures).where(procedures.c.id.in_(missing)))
            for row in result.mappings().all():
                record = dict(row)
                found[record["id"]] = record
                if self.cache:
                    self.cache.set_json(
                        procedure_cache_key(record["id"]), record, ttl=settings.procedure_cache_ttl
                    )

        return found
