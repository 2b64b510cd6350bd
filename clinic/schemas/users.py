"""User schemas for request/response validation."""

from pydantic import BaseModel, EmailStr, Field

from clinic.schemas.common import UserRole, UTCDateTime


class UserBase(BaseModel):
    """Base user schema with common fields."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)


class UserCreate(UserBase):
    """Schema for creating a new user."""

    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole


class UserUpdate(BaseModel):
    """Schema for updating the caller's own profile. The role cannot change here."""

    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)
    password: str | None = Field(None, min_length=6, max_length=72)


class UserResponse(UserBase):
    """User schema for API responses."""

    id: int
    role: UserRole
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime
    last_login_at: UTCDateTime | None = None

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """User fields embedded in other resources."""

    id: int
    name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}
