"""Procedure catalog model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Integer,
    Table,
    Text,
    func,
)

from clinic.models.metadata import metadata

procedures = Table(
    "procedures",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("type", Text, nullable=False, index=True),
    Column("value", Float, nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
    CheckConstraint(
        "type IN ('consultation', 'exam', 'procedure')",
        name="procedures_type_check",
    ),
    CheckConstraint("value >= 0", name="procedures_value_check"),
)
