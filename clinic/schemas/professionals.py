"""Professional schemas for request/response validation."""

from pydantic import BaseModel, Field

from clinic.schemas.users import UserSummary


class ProfessionalCreate(BaseModel):
    """Schema for registering a physician as a professional."""

    user_id: int
    specialty: str = Field(..., min_length=1, max_length=200)
    commission: float = Field(..., ge=0, le=100)


class ProfessionalUpdate(BaseModel):
    """Schema for updating a professional and its user."""

    specialty: str | None = Field(None, min_length=1, max_length=200)
    commission: float | None = Field(None, ge=0, le=100)
    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)


class ProfessionalResponse(BaseModel):
    """Schema for professional response."""

    id: int
    user_id: int
    specialty: str
    commission: float
    user: UserSummary | None = None

    model_config = {"from_attributes": True}
