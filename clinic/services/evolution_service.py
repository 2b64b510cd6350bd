"""Evolution (SOAP note) read service."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.exceptions import NotFoundException
from clinic.models.evolutions import evolutions
from clinic.repositories.ports import ClinicDirectory
from clinic.repositories.sql import SqlClinicDirectory


class EvolutionService:
    """Service reading evolutions. They are written by completing an appointment."""

    def __init__(self, db: AsyncSession, directory: ClinicDirectory | None = None):
        """Initialize service with database session and directory."""
        self.db = db
        self.directory = directory or SqlClinicDirectory(db)

    async def _with_professionals(self, rows: list[dict]) -> list[dict]:
        found = await self.directory.professionals_by_ids({row["professional_id"] for row in rows})
        return [{**row, "professional": found.get(row["professional_id"])} for row in rows]

    async def get_by_appointment(self, appointment_id: int) -> dict:
        """
        Get the evolution written for an appointment.

        Raises:
            NotFoundException: If the appointment has no evolution
        """
        query = select(evolutions).where(evolutions.c.appointment_id == appointment_id)
        result = await self.db.execute(query)
        evolution = result.mappings().first()

        if not evolution:
            raise NotFoundException("Evolution not found for this appointment")

        [enriched] = await self._with_professionals([dict(evolution)])
        return enriched

    async def list_by_patient(self, patient_id: int) -> list[dict]:
        """List a patient's evolutions, newest first."""
        query = (
            select(evolutions)
            .where(evolutions.c.patient_id == patient_id)
            .order_by(evolutions.c.created_at.desc(), evolutions.c.id.desc())
        )
        result = await self.db.execute(query)
        return await self._with_professionals([dict(row) for row in result.mappings().all()])
