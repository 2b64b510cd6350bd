"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

from clinic.schemas.common import UserRole
from clinic.schemas.users import UserResponse


class LoginRequest(BaseModel):
    """Email and password login request."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginResponse(BaseModel):
    """Login response with token and user info."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class Actor(BaseModel):
    """Authenticated caller as seen by the appointment lifecycle."""

    user_id: int
    role: UserRole
    professional_id: int | None = None

    @property
    def is_physician(self) -> bool:
        """Check if the caller is a physician."""
        return self.role == UserRole.PHYSICIAN
