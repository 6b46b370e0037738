"""Create insurance policy and claim tables.

Revision ID: 003
Revises: 002
Create Date: 2026-10-17 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "insurance_policies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Text(), nullable=False),
        sa.Column("policy_number", sa.Text(), nullable=False),
        sa.Column("provider", sa.Text(), nullable=False),
        sa.Column("coverage_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("max_coverage", sa.Numeric(12, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Text(), server_default="active", nullable=False),
        sa.CheckConstraint(
            "coverage_percentage >= 0 AND coverage_percentage <= 100",
            name="insurance_policies_percentage_range",
        ),
        sa.CheckConstraint("max_coverage >= 0", name="insurance_policies_max_coverage_check"),
        sa.CheckConstraint(
            "status IN ('active', 'expired', 'cancelled')",
            name="insurance_policies_status_check",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("policy_number"),
    )
    op.create_index(
        "ix_insurance_policies_patient_status",
        "insurance_policies",
        ["patient_id", "status"],
    )

    op.create_table(
        "insurance_claims",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("policy_id", sa.Uuid(), nullable=False),
        sa.Column("payment_id", sa.Uuid(), nullable=False),
        sa.Column("claim_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("approved_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.Text(), server_default="submitted", nullable=False),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('submitted', 'approved', 'rejected')",
            name="insurance_claims_status_check",
        ),
        sa.ForeignKeyConstraint(
            ["policy_id"],
            ["insurance_policies.id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_insurance_claims_payment_id", "insurance_claims", ["payment_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("ix_insurance_claims_payment_id", table_name="insurance_claims")
    op.drop_table("insurance_claims")
    op.drop_index("ix_insurance_policies_patient_status", table_name="insurance_policies")
    op.drop_table("insurance_policies")
