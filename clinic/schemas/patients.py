"""Patient schemas for request/response validation."""

from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator

from clinic.schemas.common import Gender, UTCDateTime


class PatientBase(BaseModel):
    """Base patient schema with common fields."""

    name: str = Field(..., min_length=3, max_length=200)
    email: EmailStr | None = None
    phone: str = Field(..., min_length=7, max_length=20)
    document_id: str | None = Field(None, max_length=30)
    profession: str | None = Field(None, max_length=200)
    birth_date: date
    gender: Gender
    address: str | None = Field(None, max_length=500)
    observations: str | None = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names made of whitespace."""
        cleaned = v.strip()
        if len(cleaned) < 3:
            raise ValueError("Patient name must have at least 3 characters")
        return cleaned


class PatientCreate(PatientBase):
    """Schema for full patient registration."""


class PatientQuickCreate(BaseModel):
    """Front-desk registration with only a name, completed at check-in."""

    name: str = Field(..., min_length=3, max_length=200)
    phone: str | None = Field(None, max_length=20)


class PatientUpdate(BaseModel):
    """Schema for updating a patient."""

    name: str | None = Field(None, min_length=3, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=7, max_length=20)
    document_id: str | None = Field(None, max_length=30)
    profession: str | None = Field(None, max_length=200)
    birth_date: date | None = None
    gender: Gender | None = None
    address: str | None = Field(None, max_length=500)
    observations: str | None = Field(None, max_length=2000)


class PatientResponse(BaseModel):
    """Schema for patient response."""

    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    document_id: str | None = None
    profession: str | None = None
    birth_date: date | None = None
    gender: Gender
    address: str | None = None
    observations: str | None = None
    created_by: int
    needs_completion: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime

    model_config = {"from_attributes": True}
