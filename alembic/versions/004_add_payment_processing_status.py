"""Add processing status to payments.

Revision ID: 004
Revises: 003
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.drop_constraint("payments_status_check", "payments", type_="check")
    op.create_check_constraint(
        "payments_status_check",
        "payments",
        "status IN ('pending', 'processing', 'completed', 'failed', 'refunded')",
    )


def downgrade() -> None:
    """Downgrade database schema."""
    # Payments caught mid-charge fall back to failed so they can be retried
    op.execute("UPDATE payments SET status = 'failed' WHERE status = 'processing'")
    op.drop_constraint("payments_status_check", "payments", type_="check")
    op.create_check_constraint(
        "payments_status_check",
        "payments",
        "status IN ('pending', 'completed', 'failed', 'refunded')",
    )
