"""Create payments table.

Revision ID: 002
Revises: 001
Create Date: 2026-10-17 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("appointment_id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("insurance_coverage", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("patient_portion", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_method", sa.Text(), server_default="pending", nullable=False),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("transaction_id", sa.Text(), nullable=True),
        sa.Column("insurance_claim_id", sa.Text(), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("amount > 0", name="payments_amount_positive"),
        sa.CheckConstraint(
            "insurance_coverage >= 0 AND patient_portion >= 0",
            name="payments_split_non_negative",
        ),
        sa.CheckConstraint(
            "abs(amount - (insurance_coverage + patient_portion)) < 0.005",
            name="payments_split_balanced",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded')",
            name="payments_status_check",
        ),
        sa.CheckConstraint(
            "payment_method IN ('cash', 'card', 'mixed', 'pending')",
            name="payments_method_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index("ix_payments_appointment_id", "payments", ["appointment_id"])
    op.create_index("ix_payments_patient_id", "payments", ["patient_id"])
    op.create_index("ix_payments_created_at", "payments", ["created_at"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("ix_payments_created_at", table_name="payments")
    op.drop_index("ix_payments_patient_id", table_name="payments")
    op.drop_index("ix_payments_appointment_id", table_name="payments")
    op.drop_table("payments")
