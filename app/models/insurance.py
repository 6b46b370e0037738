"""Insurance policy and claim tables using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    Table,
    Text,
    Uuid,
    func,
)

from app.models.appointments import metadata

# Policies are maintained by the insurance administration side; read-only here
insurance_policies = Table(
    "insurance_policies",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("patient_id", Text, nullable=False),
    Column("policy_number", Text, nullable=False, unique=True),
    Column("provider", Text, nullable=False),
    Column("coverage_percentage", Numeric(5, 2), nullable=False),
    Column("max_coverage", Numeric(12, 2), nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("status", Text, nullable=False, server_default="active"),
    CheckConstraint(
        "coverage_percentage >= 0 AND coverage_percentage <= 100",
        name="insurance_policies_percentage_range",
    ),
    CheckConstraint("max_coverage >= 0", name="insurance_policies_max_coverage_check"),
    CheckConstraint(
        "status IN ('active', 'expired', 'cancelled')",
        name="insurance_policies_status_check",
    ),
    Index("ix_insurance_policies_patient_status", "patient_id", "status"),
)

insurance_claims = Table(
    "insurance_claims",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column(
        "policy_id",
        Uuid,
        ForeignKey("insurance_policies.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("payment_id", Uuid, nullable=False),
    Column("claim_amount", Numeric(12, 2), nullable=False),
    Column("approved_amount", Numeric(12, 2), nullable=False),
    Column("status", Text, nullable=False, server_default="submitted"),
    Column("submitted_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("processed_at", DateTime(timezone=True), nullable=True),
    CheckConstraint(
        "status IN ('submitted', 'approved', 'rejected')",
        name="insurance_claims_status_check",
    ),
    Index("ix_insurance_claims_payment_id", "payment_id"),
)
