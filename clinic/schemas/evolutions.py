"""Evolution (SOAP note) schemas."""

from pydantic import BaseModel, Field

from clinic.schemas.common import UTCDateTime
from clinic.schemas.professionals import ProfessionalResponse


class EvolutionContent(BaseModel):
    """SOAP note body written when a consultation is completed."""

    subjective: str | None = Field(None, max_length=10000)
    objective: str | None = Field(None, max_length=10000)
    assessment: str | None = Field(None, max_length=10000)
    plan: str | None = Field(None, max_length=10000)
    diagnostics: str | None = Field(None, max_length=10000)
    prescription: str | None = Field(None, max_length=10000)
    exams: str | None = Field(None, max_length=10000)
    notes: str | None = Field(None, max_length=10000)


class EvolutionCreate(EvolutionContent):
    """Schema for recording an evolution, which completes the appointment."""

    appointment_id: int


class EvolutionResponse(EvolutionContent):
    """Schema for evolution response."""

    id: int
    appointment_id: int
    professional_id: int
    patient_id: int
    created_at: UTCDateTime

    model_config = {"from_attributes": True}


class EvolutionDetail(EvolutionResponse):
    """Evolution enriched with the authoring professional."""

    professional: ProfessionalResponse | None = None
