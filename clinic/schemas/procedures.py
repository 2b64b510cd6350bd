"""Procedure schemas for request/response validation."""

from pydantic import BaseModel, Field

from clinic.schemas.common import ProcedureType


class ProcedureCreate(BaseModel):
    """Schema for creating a procedure."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    type: ProcedureType
    value: float = Field(..., ge=0)


class ProcedureUpdate(BaseModel):
    """Schema for updating a procedure."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    type: ProcedureType | None = None
    value: float | None = Field(None, ge=0)


class ProcedureResponse(BaseModel):
    """Schema for procedure response."""

    id: int
    name: str
    description: str | None = None
    type: ProcedureType
    value: float

    model_config = {"from_attributes": True}
