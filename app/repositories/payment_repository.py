"""Payment store backed by the payments table."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import and_, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException, ValidationException
from app.models.payments import payments
from app.schemas.payments import PaymentMethod, PaymentStatus

CENT = Decimal("0.01")

SPLIT_FIELDS = ("amount", "insurance_coverage", "patient_portion")

# Statuses from which a payment may still be claimed for settlement
SETTLEABLE_STATUSES = (PaymentStatus.PENDING.value, PaymentStatus.FAILED.value)

# Statuses a failure report may move to failed
FAILABLE_STATUSES = SETTLEABLE_STATUSES + (PaymentStatus.PROCESSING.value,)


def check_cents(*amounts: Decimal) -> None:
    """
    Reject amounts that cannot be stored exactly in whole cents.

    Raises:
        ValidationException: If any amount has a fraction of a cent
    """
    for amount in amounts:
        amount = Decimal(amount)
        if amount != amount.quantize(CENT):
            raise ValidationException("Amounts must be in whole cents")


def check_split(amount: Decimal, insurance_coverage: Decimal, patient_portion: Decimal) -> None:
    """
    Enforce ``amount == insurance_coverage + patient_portion`` in whole cents.

    Raises:
        ValidationException: If an amount has a fraction of a cent or the
            split does not add up
    """
    check_cents(amount, insurance_coverage, patient_portion)
    if amount != insurance_coverage + patient_portion:
        raise ValidationException(
            "Amount must equal insurance coverage plus patient portion"
        )


class PaymentRepository:
    """Persistence for payment records."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def get(self, payment_id: UUID) -> dict[str, Any] | None:
        """Fetch one payment by ID."""
        stmt = select(payments).where(payments.c.id == payment_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        return dict(row._mapping) if row else None

    async def list_by_patient(self, patient_id: str) -> list[dict[str, Any]]:
        """List a patient's payments, newest first."""
        stmt = (
            select(payments)
            .where(payments.c.patient_id == patient_id)
            .order_by(payments.c.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]

    async def list_by_date_range(self, start: datetime, end: datetime) -> list[dict[str, Any]]:
        """List payments created within [start, end], oldest first."""
        stmt = (
            select(payments)
            .where(
                and_(
                    payments.c.created_at >= start,
                    payments.c.created_at <= end,
                )
            )
            .order_by(payments.c.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]

    async def create(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a new payment in the pending state."""
        check_split(values["amount"], values["insurance_coverage"], values["patient_portion"])

        now = datetime.now(UTC)
        stmt = (
            insert(payments)
            .values(
                **values,
                status=PaymentStatus.PENDING.value,
                created_at=now,
                updated_at=now,
            )
            .returning(payments)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping)

    async def update(self, payment_id: UUID, values: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update.

        When any money field changes, the resulting split is re-checked
        against the stored values before writing.

        Raises:
            NotFoundException: If the payment does not exist
            ValidationException: If the resulting split does not add up
        """
        current = await self.get(payment_id)
        if current is None:
            raise NotFoundException("Payment not found")

        if any(field in values for field in SPLIT_FIELDS):
            merged = {field: values.get(field, current[field]) for field in SPLIT_FIELDS}
            check_split(**merged)

        stmt = (
            update(payments)
            .where(payments.c.id == payment_id)
            .values(**values, updated_at=datetime.now(UTC))
            .returning(payments)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping)

    async def claim_for_processing(self, payment_id: UUID) -> dict[str, Any] | None:
        """
        Move a pending or failed payment to processing.

        Only one caller can win the claim, so a payment is charged at most
        once even when settlements race.

        Returns:
            Updated row, or None if the payment is not settleable
        """
        stmt = (
            update(payments)
            .where(
                and_(
                    payments.c.id == payment_id,
                    payments.c.status.in_(SETTLEABLE_STATUSES),
                )
            )
            .values(status=PaymentStatus.PROCESSING.value, updated_at=datetime.now(UTC))
            .returning(payments)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping) if row else None

    async def mark_completed(
        self,
        payment_id: UUID,
        payment_method: PaymentMethod,
        transaction_id: str,
    ) -> dict[str, Any] | None:
        """
        Settle a payment claimed for processing.

        Returns:
            Updated row, or None if the payment is no longer processing
        """
        now = datetime.now(UTC)
        stmt = (
            update(payments)
            .where(
                and_(
                    payments.c.id == payment_id,
                    payments.c.status == PaymentStatus.PROCESSING.value,
                )
            )
            .values(
                status=PaymentStatus.COMPLETED.value,
                payment_method=payment_method.value,
                transaction_id=transaction_id,
                paid_at=now,
                updated_at=now,
            )
            .returning(payments)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping) if row else None

    async def mark_failed(self, payment_id: UUID) -> dict[str, Any] | None:
        """
        Mark a pending, processing or failed payment as failed.

        Returns:
            Updated row, or None if the payment is completed or refunded
        """
        stmt = (
            update(payments)
            .where(
                and_(
                    payments.c.id == payment_id,
                    payments.c.status.in_(FAILABLE_STATUSES),
                )
            )
            .values(status=PaymentStatus.FAILED.value, updated_at=datetime.now(UTC))
            .returning(payments)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping) if row else None
