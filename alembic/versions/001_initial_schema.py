"""Create clinic schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create users, professionals, patients, procedures, appointments and evolutions."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "role IN ('admin', 'receptionist', 'physician')",
            name="users_role_check",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "professionals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("specialty", sa.String(200), nullable=False),
        sa.Column("commission", sa.Float(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "commission >= 0 AND commission <= 100",
            name="professionals_commission_check",
        ),
    )
    op.create_index("ix_professionals_user_id", "professionals", ["user_id"], unique=True)

    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("document_id", sa.String(30), nullable=True),
        sa.Column("profession", sa.Text(), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "needs_completion", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "gender IN ('male', 'female', 'other')",
            name="patients_gender_check",
        ),
    )
    op.create_index("ix_patients_name", "patients", ["name"])

    op.create_table(
        "procedures",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('consultation', 'exam', 'procedure')",
            name="procedures_type_check",
        ),
        sa.CheckConstraint("value >= 0", name="procedures_value_check"),
    )
    op.create_index("ix_procedures_type", "procedures", ["type"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=True),
        sa.Column(
            "professional_id",
            sa.Integer(),
            sa.ForeignKey("professionals.id"),
            nullable=False,
        ),
        sa.Column("patient_name", sa.Text(), nullable=True),
        sa.Column("patient_phone", sa.String(20), nullable=True),
        sa.Column("is_pending", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("scheduled_at", sa.DateTime(), nullable=False),
        sa.Column("checked_in_at", sa.DateTime(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="scheduled"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "status IN ('scheduled', 'waiting', 'in_progress', 'completed', 'cancelled')",
            name="appointments_status_check",
        ),
    )
    op.create_index(
        "idx_appointments_professional_scheduled",
        "appointments",
        ["professional_id", "scheduled_at"],
    )

    op.create_table(
        "appointment_procedures",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "appointment_id",
            sa.Integer(),
            sa.ForeignKey("appointments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("procedure_id", sa.Integer(), sa.ForeignKey("procedures.id"), nullable=False),
        sa.UniqueConstraint("appointment_id", "procedure_id", name="uq_appointment_procedure"),
    )
    op.create_index(
        "ix_appointment_procedures_appointment_id",
        "appointment_procedures",
        ["appointment_id"],
    )

    op.create_table(
        "evolutions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "appointment_id",
            sa.Integer(),
            sa.ForeignKey("appointments.id"),
            nullable=False,
        ),
        sa.Column(
            "professional_id",
            sa.Integer(),
            sa.ForeignKey("professionals.id"),
            nullable=False,
        ),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("subjective", sa.Text(), nullable=True),
        sa.Column("objective", sa.Text(), nullable=True),
        sa.Column("assessment", sa.Text(), nullable=True),
        sa.Column("plan", sa.Text(), nullable=True),
        sa.Column("diagnostics", sa.Text(), nullable=True),
        sa.Column("prescription", sa.Text(), nullable=True),
        sa.Column("exams", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_evolutions_appointment_id", "evolutions", ["appointment_id"], unique=True)
    op.create_index("ix_evolutions_patient_id", "evolutions", ["patient_id"])


def downgrade() -> None:
    """Drop the clinic schema."""
    op.drop_index("ix_evolutions_patient_id", table_name="evolutions")
    op.drop_index("ix_evolutions_appointment_id", table_name="evolutions")
    op.drop_table("evolutions")
    op.drop_index("ix_appointment_procedures_appointment_id", table_name="appointment_procedures")
    op.drop_table("appointment_procedures")
    op.drop_index("idx_appointments_professional_scheduled", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_procedures_type", table_name="procedures")
    op.drop_table("procedures")
    op.drop_index("ix_patients_name", table_name="patients")
    op.drop_table("patients")
    op.drop_index("ix_professionals_user_id", table_name="professionals")
    op.drop_table("professionals")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
