"""Payments table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Numeric,
    Table,
    Text,
    Uuid,
    func,
)

from app.models.appointments import metadata

payments = Table(
    "payments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("appointment_id", Uuid, nullable=False),
    Column("patient_id", Text, nullable=False),
    # Money
    Column("amount", Numeric(12, 2), nullable=False),
    Column("insurance_coverage", Numeric(12, 2), nullable=False, server_default="0"),
    Column("patient_portion", Numeric(12, 2), nullable=False),
    # Settlement
    Column("payment_method", Text, nullable=False, server_default="pending"),
    Column("status", Text, nullable=False, server_default="pending"),
    Column("transaction_id", Text, nullable=True),
    Column("insurance_claim_id", Text, nullable=True),
    Column("paid_at", DateTime(timezone=True), nullable=True),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    # Constraints
    CheckConstraint("amount > 0", name="payments_amount_positive"),
    CheckConstraint(
        "insurance_coverage >= 0 AND patient_portion >= 0",
        name="payments_split_non_negative",
    ),
    CheckConstraint(
        "abs(amount - (insurance_coverage + patient_portion)) < 0.005",
        name="payments_split_balanced",
    ),
    CheckConstraint(
        "status IN ('pending', 'processing', 'completed', 'failed', 'refunded')",
        name="payments_status_check",
    ),
    CheckConstraint(
        "payment_method IN ('cash', 'card', 'mixed', 'pending')",
        name="payments_method_check",
    ),
    Index("ix_payments_appointment_id", "appointment_id"),
    Index("ix_payments_patient_id", "patient_id"),
    Index("ix_payments_created_at", "created_at"),
)
