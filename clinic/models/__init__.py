"""Database models."""

from clinic.models.appointments import appointment_procedures, appointments
from clinic.models.evolutions import evolutions
from clinic.models.metadata import metadata
from clinic.models.patients import patients
from clinic.models.procedures import procedures
from clinic.models.professionals import professionals
from clinic.models.users import users

__all__ = [
    "appointment_procedures",
    "appointments",
    "evolutions",
    "metadata",
    "patients",
    "procedures",
    "professionals",
    "users",
]
