"""Patient model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
    text,
)

from clinic.models.metadata import metadata

patients = Table(
    "patients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # Personal information
    Column("name", Text, nullable=False, index=True),
    Column("email", Text),
    Column("phone", String(20)),
    Column("document_id", String(30)),
    Column("profession", Text),
    Column("birth_date", Date),
    Column("gender", String(20), nullable=False),
    Column("address", Text),
    Column("observations", Text),
    # Registration
    Column("created_by", Integer, ForeignKey("users.id"), nullable=False),
    # Set by quick registration until the front desk fills the remaining fields
    Column("needs_completion", Boolean, nullable=False, server_default=text("false")),
    # Metadata
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
    CheckConstraint("gender IN ('male', 'female', 'other')", name="patients_gender_check"),
)
