"""Storage interfaces the appointment lifecycle and the queue depend on."""

from collections.abc import Collection, Mapping
from datetime import datetime
from typing import Any, Protocol

STALE_VERSION_MESSAGE = "Appointment was modified by another request; reload and retry"

# Inclusive (start, end) bounds in naive UTC
DayWindow = tuple[datetime, datetime]


def queue_timestamp(appointment: Mapping[str, Any]) -> datetime:
    """Arrival time once checked in, booked time before."""
    return appointment["checked_in_at"] or appointment["scheduled_at"]


class AppointmentRepository(Protocol):
    """Keyed store of appointments and their procedure associations.

    Every write checks ``expected_version`` against the stored ``version`` and
    increments it; a mismatch raises ``ConflictException``.
    """

    async def get(self, appointment_id: int) -> dict | None:
        """Get appointment by ID."""
        ...

    async def create(self, values: dict[str, Any], procedure_ids: list[int]) -> dict:
        """Create an appointment and its procedure rows atomically."""
        ...

    async def update_status(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
    ) -> dict:
        """Write a status change and its side-effect columns."""
        ...

    async def complete(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
        evolution: dict[str, Any],
    ) -> tuple[dict, dict]:
        """Write the completion and its evolution record atomically."""
        ...

    async def bind_patient(
        self,
        appointment_id: int,
        patient_id: int,
        expected_version: int,
    ) -> dict:
        """Bind a patient to a provisional booking."""
        ...

    async def list_by_professional(
        self,
        professional_id: int,
        window: DayWindow | None = None,
    ) -> list[dict]:
        """List a professional's appointments, optionally within a window."""
        ...

    async def list_all(self, window: DayWindow | None = None) -> list[dict]:
        """List all appointments, optionally within a window."""
        ...

    async def list_by_filter(
        self,
        window: DayWindow,
        statuses: Collection[str] | None = None,
        professional_id: int | None = None,
    ) -> list[dict]:
        """List appointments in a window, ordered by queue timestamp then ID."""
        ...

    async def procedures_for(self, appointment_ids: Collection[int]) -> dict[int, list[dict]]:
        """Map appointment IDs to their procedure records."""
        ...


class ClinicDirectory(Protocol):
    """Read-side lookups of the records appointments reference."""

    async def patients_by_ids(self, patient_ids: Collection[int]) -> dict[int, dict]:
        """Map patient IDs to patient records."""
        ...

    async def professionals_by_ids(self, professional_ids: Collection[int]) -> dict[int, dict]:
        """Map professional IDs to professional records with an embedded ``user``."""
        ...

    async def procedures_by_ids(self, procedure_ids: Collection[int]) -> dict[int, dict]:
        """Map procedure IDs to procedure records."""
        ...
