"""Appointment schemas for request/response validation."""

from enum import Enum

from pydantic import BaseModel, Field, computed_field

from clinic.schemas.common import InputDateTime, UTCDateTime
from clinic.schemas.evolutions import EvolutionContent
from clinic.schemas.patients import PatientResponse
from clinic.schemas.procedures import ProcedureResponse
from clinic.schemas.professionals import ProfessionalResponse


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = frozenset(
    {AppointmentStatus.SCHEDULED, AppointmentStatus.WAITING, AppointmentStatus.IN_PROGRESS}
)
TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment.

    ``patient_id`` may be omitted for a provisional booking; the patient is
    bound later through complete-patient-info.
    """

    patient_id: int | None = None
    professional_id: int
    date: InputDateTime
    procedure_ids: list[int] = Field(default_factory=list)
    notes: str | None = Field(None, max_length=1000)
    patient_name: str | None = Field(None, max_length=200)
    patient_phone: str | None = Field(None, max_length=20)


class AppointmentStatusUpdate(BaseModel):
    """Schema for the generic status change.

    ``status`` is kept as a plain string so unknown values are reported as an
    invalid transition instead of a schema error.
    """

    status: str
    notes: str | None = Field(None, max_length=1000)
    evolution: EvolutionContent | None = None


class CompletePatientInfo(BaseModel):
    """Schema for binding a patient to a provisional booking."""

    patient_id: int


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: int
    patient_id: int | None = None
    professional_id: int
    patient_name: str | None = None
    patient_phone: str | None = None
    is_pending: bool
    scheduled_at: UTCDateTime
    checked_in_at: UTCDateTime | None = None
    status: AppointmentStatus
    notes: str | None = None
    version: int
    created_at: UTCDateTime
    updated_at: UTCDateTime
    cancelled_at: UTCDateTime | None = None
    completed_at: UTCDateTime | None = None

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def date(self) -> UTCDateTime:
        """Queue-order timestamp: arrival time once checked in, booked time before."""
        return self.checked_in_at or self.scheduled_at


class AppointmentDetail(AppointmentResponse):
    """Appointment enriched with patient, professional and procedures."""

    patient: PatientResponse | None = None
    professional: ProfessionalResponse | None = None
    procedures: list[ProcedureResponse] = Field(default_factory=list)


class QueueEntry(AppointmentDetail):
    """Waiting queue row."""

    wait_minutes: int | None = None
