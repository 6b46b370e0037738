"""Insurance eligibility and claim service."""

import uuid
from collections.abc import Callable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

import structlog

from app.core.exceptions import NotFoundException, ValidationException
from app.core.time_slots import clinic_now
from app.repositories.insurance_repository import InsuranceRepository
from app.schemas.insurance import (
    ClaimStatus,
    EligibilityResponse,
    InsuranceClaimResponse,
    InsurancePolicyResponse,
)
from app.services.notification_service import NotificationSink, notify

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


def clinic_today() -> date:
    """Current date at the clinic."""
    return clinic_now().date()


def covered_amount(
    claim_amount: Decimal,
    coverage_percentage: Decimal,
    max_coverage: Decimal,
) -> Decimal:
    """
    Compute the insurer's share of a claim.

    ``min(claim * percentage / 100, max_coverage)``, rounded half-up to
    cents. With a percentage of at most 100 the result never exceeds the
    claim.
    """
    share = (Decimal(claim_amount) * Decimal(coverage_percentage) / 100).quantize(
        CENT, rounding=ROUND_HALF_UP
    )
    return min(share, Decimal(max_coverage))


def generate_claim_id() -> str:
    """Generate a claim reference for downstream submission."""
    return f"CLM{uuid.uuid4().hex[:12].upper()}"


class InsuranceService:
    """Service for insurance eligibility checks and claims."""

    def __init__(
        self,
        repository: InsuranceRepository,
        notifier: NotificationSink,
        today: Callable[[], date] = clinic_today,
    ):
        """Initialize service with its collaborators."""
        self.repository = repository
        self.notifier = notifier
        self.today = today

    async def find_eligible_policy(self, patient_id: str) -> dict[str, Any]:
        """
        Find the policy that currently covers a patient.

        A policy is eligible when it is active, has started and has not
        ended. When several qualify, the highest coverage percentage wins,
        then the latest end date.

        Raises:
            NotFoundException: If no active policy exists or all have expired
        """
        today = self.today()
        policies = await self.repository.list_active_policies(patient_id, started_by=today)

        if not policies:
            raise NotFoundException("No active insurance policy found")

        current = [policy for policy in policies if policy["end_date"] >= today]
        if not current:
            raise NotFoundException("Insurance policy has expired")

        return current[0]

    async def check_eligibility(
        self,
        patient_id: str,
        claim_amount: Decimal,
    ) -> EligibilityResponse:
        """
        Check how much of a claim the patient's insurance covers.

        Args:
            patient_id: Patient ID
            claim_amount: Amount being claimed

        Returns:
            Eligibility with approved amount and a claim reference

        Raises:
            NotFoundException: If the patient has no eligible policy
        """
        policy = await self.find_eligible_policy(patient_id)

        approved_amount = covered_amount(
            claim_amount,
            policy["coverage_percentage"],
            policy["max_coverage"],
        )
        claim_id = generate_claim_id()

        logger.info(
            "eligibility_checked",
            patient_id=patient_id,
            policy_number=policy["policy_number"],
            claim_amount=str(claim_amount),
            approved_amount=str(approved_amount),
            claim_id=claim_id,
        )

        return EligibilityResponse(
            eligible=True,
            coverage_percentage=policy["coverage_percentage"],
            approved_amount=approved_amount,
            claim_id=claim_id,
        )

    async def get_patient_policies(self, patient_id: str) -> list[InsurancePolicyResponse]:
        """List all of a patient's policies."""
        rows = await self.repository.list_policies_by_patient(patient_id)
        return [InsurancePolicyResponse.model_validate(row) for row in rows]

    async def submit_claim(
        self,
        policy_id: UUID,
        payment_id: UUID,
        claim_amount: Decimal,
    ) -> InsuranceClaimResponse:
        """
        Submit a claim against a policy for a payment.

        Raises:
            NotFoundException: If the policy does not exist
            ValidationException: If the claim amount is not positive
        """
        if claim_amount <= 0:
            raise ValidationException("Claim amount must be positive")

        policy = await self.repository.get_policy(policy_id)
        if not policy:
            raise NotFoundException("Insurance policy not found")

        row = await self.repository.create_claim(
            {
                "policy_id": policy_id,
                "payment_id": payment_id,
                "claim_amount": claim_amount,
                "approved_amount": covered_amount(
                    claim_amount,
                    policy["coverage_percentage"],
                    policy["max_coverage"],
                ),
            }
        )
        logger.info(
            "insurance_claim_submitted",
            claim_id=str(row["id"]),
            policy_number=policy["policy_number"],
            claim_amount=str(claim_amount),
        )

        await notify(self.notifier.send_insurance_claim_update, str(row["id"]), row["status"])

        return InsuranceClaimResponse.model_validate(row)

    async def update_claim_status(
        self,
        claim_id: UUID,
        status: ClaimStatus,
    ) -> InsuranceClaimResponse:
        """
        Record the insurer's decision on a submitted claim.

        A rejected claim has its approved amount set to zero.

        Raises:
            NotFoundException: If the claim does not exist
            ValidationException: If the claim was already decided or status is not a decision
        """
        if status == ClaimStatus.SUBMITTED:
            raise ValidationException("Claim status must be approved or rejected")

        values: dict[str, Any] = {}
        if status == ClaimStatus.REJECTED:
            values["approved_amount"] = Decimal("0")

        row = await self.repository.resolve_claim(claim_id, status, **values)
        if row is None:
            if not await self.repository.get_claim(claim_id):
                raise NotFoundException("Insurance claim not found")
            raise ValidationException("Insurance claim has already been processed")

        logger.info("insurance_claim_processed", claim_id=str(claim_id), status=status.value)

        await notify(self.notifier.send_insurance_claim_update, str(claim_id), status.value)

        return InsuranceClaimResponse.model_validate(row)
