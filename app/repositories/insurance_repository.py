"""Insurance policy and claim stores."""

from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import and_, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.insurance import insurance_claims, insurance_policies
from app.schemas.insurance import ClaimStatus, PolicyStatus


class InsuranceRepository:
    """Persistence for insurance policies and claims."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def get_policy(self, policy_id: UUID) -> dict[str, Any] | None:
        """Fetch one policy by ID."""
        stmt = select(insurance_policies).where(insurance_policies.c.id == policy_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        return dict(row._mapping) if row else None

    async def list_policies_by_patient(self, patient_id: str) -> list[dict[str, Any]]:
        """List all of a patient's policies, latest ending first."""
        stmt = (
            select(insurance_policies)
            .where(insurance_policies.c.patient_id == patient_id)
            .order_by(insurance_policies.c.end_date.desc())
        )
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]

    async def list_active_policies(
        self,
        patient_id: str,
        started_by: date,
    ) -> list[dict[str, Any]]:
        """
        List a patient's active policies that have started by ``started_by``.

        Ordered by preference: highest coverage percentage first, then the
        latest end date.
        """
        stmt = (
            select(insurance_policies)
            .where(
                and_(
                    insurance_policies.c.patient_id == patient_id,
                    insurance_policies.c.status == PolicyStatus.ACTIVE.value,
                    insurance_policies.c.start_date <= started_by,
                )
            )
            .order_by(
                insurance_policies.c.coverage_percentage.desc(),
                insurance_policies.c.end_date.desc(),
            )
        )
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]

    async def create_policy(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a policy. Used by seeding scripts and tests."""
        stmt = insert(insurance_policies).values(**values).returning(insurance_policies)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping)

    async def get_claim(self, claim_id: UUID) -> dict[str, Any] | None:
        """Fetch one claim by ID."""
        stmt = select(insurance_claims).where(insurance_claims.c.id == claim_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        return dict(row._mapping) if row else None

    async def create_claim(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a claim in the submitted state."""
        stmt = (
            insert(insurance_claims)
            .values(
                **values,
                status=ClaimStatus.SUBMITTED.value,
                submitted_at=datetime.now(UTC),
            )
            .returning(insurance_claims)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping)

    async def resolve_claim(
        self,
        claim_id: UUID,
        status: ClaimStatus,
        **values: Any,
    ) -> dict[str, Any] | None:
        """
        Record the insurer's decision on a submitted claim.

        Returns:
            Updated row, or None if the claim was not in the submitted state
        """
        stmt = (
            update(insurance_claims)
            .where(
                and_(
                    insurance_claims.c.id == claim_id,
                    insurance_claims.c.status == ClaimStatus.SUBMITTED.value,
                )
            )
            .values(status=status.value, processed_at=datetime.now(UTC), **values)
            .returning(insurance_claims)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()
        return dict(row._mapping) if row else None
