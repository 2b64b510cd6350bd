"""Shared schema types."""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, PlainSerializer

from clinic.core.clock import to_naive_utc


class UserRole(str, Enum):
    """User role enumeration."""

    ADMIN = "admin"
    RECEPTIONIST = "receptionist"
    PHYSICIAN = "physician"


class ProcedureType(str, Enum):
    """Procedure type enumeration."""

    CONSULTATION = "consultation"
    EXAM = "exam"
    PROCEDURE = "procedure"


class Gender(str, Enum):
    """Patient gender enumeration."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


def _utc_isoformat(value: datetime) -> str:
    return value.replace(tzinfo=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Incoming timestamps are stored as naive UTC
InputDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]

# Stored naive UTC rendered with millisecond precision and a Z suffix
UTCDateTime = Annotated[
    datetime,
    AfterValidator(to_naive_utc),
    PlainSerializer(_utc_isoformat, return_type=str, when_used="json"),
]
