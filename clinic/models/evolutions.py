"""Evolution (SOAP note) model using SQLAlchemy Core."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Table,
    Text,
    func,
)

from clinic.models.metadata import metadata

evolutions = Table(
    "evolutions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "appointment_id",
        Integer,
        ForeignKey("appointments.id"),
        nullable=False,
        unique=True,
        index=True,
    ),
    Column("professional_id", Integer, ForeignKey("professionals.id"), nullable=False),
    Column("patient_id", Integer, ForeignKey("patients.id"), nullable=False, index=True),
    # SOAP
    Column("subjective", Text),
    Column("objective", Text),
    Column("assessment", Text),
    Column("plan", Text),
    # Additional fields
    Column("diagnostics", Text),
    Column("prescription", Text),
    Column("exams", Text),
    Column("notes", Text),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)
