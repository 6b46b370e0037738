"""Appointments table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    MetaData,
    Table,
    Text,
    Uuid,
    func,
    text,
)

# Metadata for all tables
metadata = MetaData()

# Keep in sync with ACTIVE_STATUSES in app.core.appointment_states
ACTIVE_STATUS_CLAUSE = "status IN ('scheduled', 'confirmed', 'checked_in')"

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    # Ownership / references (immutable after creation)
    Column("patient_id", Text, nullable=False),
    Column("doctor_id", Text, nullable=False),
    Column("department_id", Text, nullable=False),
    # Appointment details
    Column("appointment_date", Date, nullable=False),
    Column("time_slot", Text, nullable=False),
    Column("reason", Text, nullable=False),
    Column("notes", Text, nullable=False, server_default=""),
    # Status management
    Column(
        "status",
        Text,
        nullable=False,
        server_default="scheduled",
    ),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("cancelled_at", DateTime(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('scheduled', 'confirmed', 'checked_in', 'completed', 'cancelled')",
        name="appointments_status_check",
    ),
    Index("ix_appointments_patient_id", "patient_id"),
    Index("ix_appointments_doctor_date", "doctor_id", "appointment_date"),
    Index("ix_appointments_appointment_date", "appointment_date"),
    # At most one active appointment per doctor/date/slot
    Index(
        "uq_appointments_active_slot",
        "doctor_id",
        "appointment_date",
        "time_slot",
        unique=True,
        postgresql_where=text(ACTIVE_STATUS_CLAUSE),
        sqlite_where=text(ACTIVE_STATUS_CLAUSE),
    ),
)
