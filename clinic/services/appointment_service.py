"""Appointment service for business logic."""

from collections.abc import Callable
from datetime import date, datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.config import settings
from clinic.core.clock import day_window, utc_now
from clinic.core.exceptions import ConflictException, NotFoundException
from clinic.core.redis_client import CacheManager
from clinic.repositories.ports import AppointmentRepository, ClinicDirectory
from clinic.repositories.sql import SqlAppointmentRepository, SqlClinicDirectory
from clinic.schemas.appointments import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
)
from clinic.schemas.auth import Actor
from clinic.schemas.evolutions import EvolutionContent, EvolutionCreate, EvolutionResponse
from clinic.services.status_guard import TransitionRoute, plan_transition

logger = structlog.get_logger()


async def enrich_appointments(
    records: list[dict],
    repository: AppointmentRepository,
    directory: ClinicDirectory,
) -> list[dict]:
    """
    Attach patient, professional (with user) and procedures to appointment records.

    Args:
        records: Appointment records
        repository: Appointment store, for the procedure associations
        directory: Lookup of patients and professionals

    Returns:
        New records with ``patient``, ``professional`` and ``procedures`` keys
    """
    if not records:
        return []

    patient_ids = {r["patient_id"] for r in records if r["patient_id"]}
    patients = await directory.patients_by_ids(patient_ids)
    professionals = await directory.professionals_by_ids({r["professional_id"] for r in records})
    procedures = await repository.procedures_for([r["id"] for r in records])

    return [
        {
            **record,
            "patient": patients.get(record["patient_id"]) if record["patient_id"] else None,
            "professional": professionals.get(record["professional_id"]),
            "procedures": procedures.get(record["id"], []),
        }
        for record in records
    ]


class AppointmentService:
    """Service for booking appointments and driving their lifecycle."""

    def __init__(
        self,
        repository: AppointmentRepository,
        directory: ClinicDirectory,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize service with its store, directory and clock."""
        self.repository = repository
        self.directory = directory
        self.clock = clock

    @classmethod
    def from_session(
        cls,
        db: AsyncSession,
        cache_manager: CacheManager | None = None,
    ) -> "AppointmentService":
        """Build the service over the SQL store."""
        return cls(SqlAppointmentRepository(db), SqlClinicDirectory(db, cache_manager))

    async def create_appointment(self, data: AppointmentCreate) -> AppointmentDetail:
        """
        Book a new appointment.

        Args:
            data: Appointment creation data

        Returns:
            Created appointment with its references

        Raises:
            NotFoundException: If the professional, patient or a procedure does not exist
            ConflictException: If no procedure was selected
        """
        professionals = await self.directory.professionals_by_ids([data.professional_id])
        if data.professional_id not in professionals:
            raise NotFoundException("Professional not found")

        patient = None
        if data.patient_id is not None:
            patients = await self.directory.patients_by_ids([data.patient_id])
            patient = patients.get(data.patient_id)
            if patient is None:
                raise NotFoundException("Patient not found")

        procedure_ids = list(dict.fromkeys(data.procedure_ids))
        if not procedure_ids:
            raise ConflictException("At least one procedure must be selected")

        procedures = await self.directory.procedures_by_ids(procedure_ids)
        for procedure_id in procedure_ids:
            if procedure_id not in procedures:
                raise NotFoundException(f"Procedure #{procedure_id} not found")

        now = self.clock()
        values = {
            "patient_id": data.patient_id,
            "professional_id": data.professional_id,
            "patient_name": data.patient_name,
            "patient_phone": data.patient_phone,
            "is_pending": data.patient_id is None,
            "scheduled_at": data.date,
            "status": AppointmentStatus.SCHEDULED.value,
            "notes": data.notes,
            "version": 1,
            "created_at": now,
            "updated_at": now,
        }
        record = await self.repository.create(values, procedure_ids)

        logger.info(
            "appointment_created",
            appointment_id=record["id"],
            professional_id=data.professional_id,
            provisional=data.patient_id is None,
            procedures=procedure_ids,
        )

        return AppointmentDetail.model_validate(
            {
                **record,
                "patient": patient,
                "professional": professionals[data.professional_id],
                "procedures": [procedures[pid] for pid in procedure_ids],
            }
        )

    async def get_appointment(self, appointment_id: int) -> dict:
        """
        Get the stored appointment record.

        Raises:
            NotFoundException: If appointment not found
        """
        record = await self.repository.get(appointment_id)
        if record is None:
            raise NotFoundException("Appointment not found")
        return record

    async def get_appointment_detail(self, appointment_id: int) -> AppointmentDetail:
        """Get appointment by ID with its patient, professional and procedures."""
        record = await self.get_appointment(appointment_id)
        [enriched] = await enrich_appointments([record], self.repository, self.directory)
        return AppointmentDetail.model_validate(enriched)

    async def list_appointments(
        self,
        actor: Actor,
        day: date | None = None,
    ) -> list[AppointmentDetail]:
        """
        List appointments, restricted to their own agenda for physicians.

        Args:
            actor: Requesting user
            day: Optional calendar day in the clinic timezone

        Returns:
            Enriched appointments ordered by queue timestamp
        """
        window = day_window(day, settings.clinic_timezone) if day else None

        if actor.is_physician and actor.professional_id is not None:
            records = await self.repository.list_by_professional(actor.professional_id, window)
        else:
            records = await self.repository.list_all(window)

        enriched = await enrich_appointments(records, self.repository, self.directory)
        return [AppointmentDetail.model_validate(item) for item in enriched]

    async def _transition(
        self,
        appointment_id: int,
        requested: str | AppointmentStatus,
        actor: Actor,
        route: TransitionRoute = TransitionRoute.STATUS_UPDATE,
        notes: str | None = None,
        evolution: EvolutionContent | None = None,
    ) -> tuple[dict, dict | None]:
        """Run the lifecycle guard and persist the accepted transition."""
        record = await self.get_appointment(appointment_id)
        now = self.clock()
        plan = plan_transition(record, requested, actor, now, route)

        values: dict[str, Any] = {**plan.values, "updated_at": now}
        if notes:
            values["notes"] = notes

        evolution_row = None
        if plan.creates_evolution:
            if record["patient_id"] is None:
                raise ConflictException(
                    "A patient must be bound to the appointment before it is completed"
                )
            content = (
                evolution.model_dump(include=set(EvolutionContent.model_fields))
                if evolution
                else {}
            )
            updated, evolution_row = await self.repository.complete(
                appointment_id,
                record["version"],
                values,
                {
                    **content,
                    "appointment_id": appointment_id,
                    "professional_id": record["professional_id"],
                    "patient_id": record["patient_id"],
                    "created_at": now,
                },
            )
        else:
            updated = await self.repository.update_status(appointment_id, record["version"], values)

        logger.info(
            "appointment_status_changed",
            appointment_id=appointment_id,
            from_status=record["status"],
            to_status=plan.status.value,
            route=route.value,
            actor_role=actor.role.value,
            actor_user_id=actor.user_id,
        )
        return updated, evolution_row

    async def check_in(self, appointment_id: int, actor: Actor) -> AppointmentResponse:
        """
        Mark a scheduled appointment as arrived.

        The queue-order timestamp moves to the arrival time, so patients are
        seen in order of arrival rather than booking.
        """
        updated, _ = await self._transition(
            appointment_id,
            AppointmentStatus.WAITING,
            actor,
            route=TransitionRoute.CHECK_IN,
        )

        if updated["patient_id"] is not None:
            patients = await self.directory.patients_by_ids([updated["patient_id"]])
            patient = patients.get(updated["patient_id"])
            if patient and patient.get("needs_completion"):
                logger.info(
                    "patient_registration_incomplete",
                    appointment_id=appointment_id,
                    patient_id=updated["patient_id"],
                )

        return AppointmentResponse.model_validate(updated)

    async def start(self, appointment_id: int, actor: Actor) -> AppointmentResponse:
        """Start the consultation of a waiting patient."""
        updated, _ = await self._transition(
            appointment_id,
            AppointmentStatus.IN_PROGRESS,
            actor,
            route=TransitionRoute.START,
        )
        return AppointmentResponse.model_validate(updated)

    async def update_status(
        self,
        appointment_id: int,
        data: AppointmentStatusUpdate,
        actor: Actor,
    ) -> AppointmentResponse:
        """
        Generic status change entry point.

        Args:
            appointment_id: Appointment ID
            data: Requested status, optional notes and, for completion, the SOAP note
            actor: Requesting user

        Returns:
            Updated appointment
        """
        updated, _ = await self._transition(
            appointment_id,
            data.status,
            actor,
            notes=data.notes,
            evolution=data.evolution,
        )
        return AppointmentResponse.model_validate(updated)

    async def record_evolution(self, data: EvolutionCreate, actor: Actor) -> EvolutionResponse:
        """
        Write the SOAP note of a consultation, completing the appointment.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If the caller is not the assigned physician
            InvalidTransitionException: If the consultation is not in progress
        """
        _, evolution_row = await self._transition(
            data.appointment_id,
            AppointmentStatus.COMPLETED,
            actor,
            evolution=data,
        )
        return EvolutionResponse.model_validate(evolution_row)

    async def complete_patient_info(
        self,
        appointment_id: int,
        patient_id: int,
    ) -> AppointmentDetail:
        """
        Bind a patient to a provisional booking. Allowed only once.

        Raises:
            NotFoundException: If the appointment or the patient does not exist
            ConflictException: If the appointment already has a patient
        """
        record = await self.get_appointment(appointment_id)
        if record["patient_id"] is not None:
            raise ConflictException("This appointment already has a patient")

        patients = await self.directory.patients_by_ids([patient_id])
        if patient_id not in patients:
            raise NotFoundException("Patient not found")

        updated = await self.repository.bind_patient(appointment_id, patient_id, record["version"])

        logger.info(
            "appointment_patient_bound",
            appointment_id=appointment_id,
            patient_id=patient_id,
        )

        [enriched] = await enrich_appointments([updated], self.repository, self.directory)
        return AppointmentDetail.model_validate(enriched)
