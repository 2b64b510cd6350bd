"""In-memory keyed-map implementations of the storage interfaces.

Used by the unit tests and handy for running the lifecycle without a database.
"""

from collections.abc import Collection
from itertools import count
from typing import Any

from clinic.core.exceptions import ConflictException, NotFoundException
from clinic.repositories.ports import STALE_VERSION_MESSAGE, DayWindow, queue_timestamp

_APPOINTMENT_DEFAULTS: dict[str, Any] = {
    "patient_id": None,
    "patient_name": None,
    "patient_phone": None,
    "is_pending": True,
    "checked_in_at": None,
    "status": "scheduled",
    "notes": None,
    "version": 1,
    "cancelled_at": None,
    "completed_at": None,
}


class InMemoryAppointmentRepository:
    """Appointment store holding records in dictionaries keyed by ID."""

    def __init__(self, procedures: dict[int, dict] | None = None) -> None:
        self.appointments: dict[int, dict] = {}
        self.appointment_procedures: list[tuple[int, int]] = []
        self.evolutions: dict[int, dict] = {}
        self.procedures: dict[int, dict] = procedures if procedures is not None else {}
        self._ids = count(1)
        self._evolution_ids = count(1)

    async def get(self, appointment_id: int) -> dict | None:
        """Get a copy of the appointment, or None."""
        record = self.appointments.get(appointment_id)
        return dict(record) if record else None

    async def create(self, values: dict[str, Any], procedure_ids: list[int]) -> dict:
        """Store an appointment with default columns filled in."""
        record = {**_APPOINTMENT_DEFAULTS, **values, "id": next(self._ids)}
        self.appointments[record["id"]] = record
        self.appointment_procedures.extend((record["id"], pid) for pid in procedure_ids)
        return dict(record)

    def _versioned_update(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
    ) -> dict:
        record = self.appointments.get(appointment_id)
        if record is None:
            raise NotFoundException("Appointment not found")
        if record["version"] != expected_version:
            raise ConflictException(STALE_VERSION_MESSAGE)
        record.update(values)
        record["version"] += 1
        return dict(record)

    async def update_status(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
    ) -> dict:
        """Apply a status change under the version check."""
        return self._versioned_update(appointment_id, expected_version, values)

    async def complete(
        self,
        appointment_id: int,
        expected_version: int,
        values: dict[str, Any],
        evolution: dict[str, Any],
    ) -> tuple[dict, dict]:
        """Complete the appointment and store its evolution."""
        row = self._versioned_update(appointment_id, expected_version, values)
        evolution_row = {**evolution, "id": next(self._evolution_ids)}
        self.evolutions[evolution_row["id"]] = evolution_row
        return row, dict(evolution_row)

    async def bind_patient(
        self,
        appointment_id: int,
        patient_id: int,
        expected_version: int,
    ) -> dict:
        """Bind a patient under the version check."""
        return self._versioned_update(
            appointment_id,
            expected_version,
            {"patient_id": patient_id, "is_pending": False},
        )

    def _select(self, window: DayWindow | None, predicate: Any = None) -> list[dict]:
        selected = []
        for record in self.appointments.values():
            if window and not window[0] <= queue_timestamp(record) <= window[1]:
                continue
            if predicate and not predicate(record):
                continue
            selected.append(dict(record))
        return sorted(selected, key=lambda r: (queue_timestamp(r), r["id"]))

    async def list_by_professional(
        self,
        professional_id: int,
        window: DayWindow | None = None,
    ) -> list[dict]:
        """List a professional's appointments in queue order."""
        return self._select(window, lambda r: r["professional_id"] == professional_id)

    async def list_all(self, window: DayWindow | None = None) -> list[dict]:
        """List appointments in queue order."""
        return self._select(window)

    async def list_by_filter(
        self,
        window: DayWindow,
        statuses: Collection[str] | None = None,
        professional_id: int | None = None,
    ) -> list[dict]:
        """List appointments in the window matching the status set and professional."""

        def matches(record: dict) -> bool:
            if statuses and record["status"] not in statuses:
                return False
            return professional_id is None or record["professional_id"] == professional_id

        return self._select(window, matches)

    async def procedures_for(self, appointment_ids: Collection[int]) -> dict[int, list[dict]]:
        """Group linked procedures by appointment ID."""
        grouped: dict[int, list[dict]] = {appointment_id: [] for appointment_id in appointment_ids}
        for appointment_id, procedure_id in self.appointment_procedures:
            if appointment_id in grouped and procedure_id in self.procedures:
                grouped[appointment_id].append(dict(self.procedures[procedure_id]))
        return grouped


class InMemoryClinicDirectory:
    """Directory over plain dictionaries of patients, professionals and procedures."""

    def __init__(
        self,
        patients: dict[int, dict] | None = None,
        professionals: dict[int, dict] | None = None,
        procedures: dict[int, dict] | None = None,
    ) -> None:
        self.patients = patients if patients is not None else {}
        self.professionals = professionals if professionals is not None else {}
        self.procedures = procedures if procedures is not None else {}

    async def patients_by_ids(self, patient_ids: Collection[int]) -> dict[int, dict]:
        """Get known patients keyed by ID."""
        return {pid: dict(self.patients[pid]) for pid in patient_ids if pid in self.patients}

    async def professionals_by_ids(self, professional_ids: Collection[int]) -> dict[int, dict]:
        """Get known professionals keyed by ID."""
        return {
            pid: dict(self.professionals[pid])
            for pid in professional_ids
            if pid in self.professionals
        }

    async def procedures_by_ids(self, procedure_ids: Collection[int]) -> dict[int, dict]:
        """Get known procedures keyed by ID."""
        return {pid: dict(self.procedures[pid]) for pid in procedure_ids if pid in self.procedures}
