"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    text,
)

from clinic.models.metadata import metadata

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # References (patient is optional for provisional bookings)
    Column("patient_id", Integer, ForeignKey("patients.id"), nullable=True),
    Column("professional_id", Integer, ForeignKey("professionals.id"), nullable=False),
    # Provisional booking contact
    Column("patient_name", Text, nullable=True),
    Column("patient_phone", String(20), nullable=True),
    Column("is_pending", Boolean, nullable=False, server_default=text("true")),
    # Timing (naive UTC)
    Column("scheduled_at", DateTime, nullable=False),
    Column("checked_in_at", DateTime, nullable=True),
    # Status management
    Column("status", Text, nullable=False, server_default="scheduled"),
    Column("notes", Text, nullable=True),
    # Optimistic locking counter
    Column("version", Integer, nullable=False, server_default=text("1")),
    # Audit fields
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
    Column("cancelled_at", DateTime, nullable=True),
    Column("completed_at", DateTime, nullable=True),
    CheckConstraint(
        "status IN ('scheduled', 'waiting', 'in_progress', 'completed', 'cancelled')",
        name="appointments_status_check",
    ),
    Index("idx_appointments_professional_scheduled", "professional_id", "scheduled_at"),
)

# Appointment <-> procedure association
appointment_procedures = Table(
    "appointment_procedures",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "appointment_id",
        Integer,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("procedure_id", Integer, ForeignKey("procedures.id"), nullable=False),
    UniqueConstraint("appointment_id", "procedure_id", name="uq_appointment_procedure"),
)
