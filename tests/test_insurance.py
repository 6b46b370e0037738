"""Tests for insurance eligibility and claims."""

import re
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.schemas.insurance import ClaimStatus, PolicyStatus
from app.services.insurance_service import covered_amount


def test_covered_amount_rounds_half_up_to_cents() -> None:
    """Shares are rounded to the cent."""
    assert covered_amount(Decimal("333.33"), Decimal("33.33"), Decimal("10000")) == Decimal("111.10")
    assert covered_amount(Decimal("0.05"), Decimal("50"), Decimal("10000")) == Decimal("0.03")


def test_covered_amount_is_capped() -> None:
    """The insurer never pays more than max_coverage."""
    assert covered_amount(Decimal("5000"), Decimal("70"), Decimal("2000")) == Decimal("2000")


@pytest.mark.asyncio
async def test_eligibility_applies_percentage(insurance_service, create_policy) -> None:
    """A 70% policy approves 70% of the claim."""
    await create_policy()

    result = await insurance_service.check_eligibility("p1", Decimal("5000"))

    assert result.eligible is True
    assert result.coverage_percentage == Decimal("70")
    assert result.approved_amount == Decimal("3500")
    assert re.fullmatch(r"CLM[0-9A-F]{12}", result.claim_id)


@pytest.mark.asyncio
async def test_eligibility_full_coverage(insurance_service, create_policy) -> None:
    """A 100% policy covers the whole claim."""
    await create_policy(coverage_percentage=Decimal("100"))

    result = await insurance_service.check_eligibility("p1", Decimal("5000"))

    assert result.approved_amount == Decimal("5000")


@pytest.mark.asyncio
async def test_eligibility_capped_by_max_coverage(insurance_service, create_policy) -> None:
    """Approved amount is limited by the policy maximum."""
    await create_policy(max_coverage=Decimal("1000"))

    result = await insurance_service.check_eligibility("p1", Decimal("5000"))

    assert result.approved_amount == Decimal("1000")


@pytest.mark.asyncio
async def test_eligibility_claim_ids_are_unique(insurance_service, create_policy) -> None:
    """Every check issues a fresh claim reference."""
    await create_policy()

    first = await insurance_service.check_eligibility("p1", Decimal("100"))
    second = await insurance_service.check_eligibility("p1", Decimal("100"))

    assert first.claim_id != second.claim_id


@pytest.mark.asyncio
async def test_no_policy(insurance_service) -> None:
    """Patients without a policy are not eligible."""
    with pytest.raises(NotFoundException, match="No active insurance policy found"):
        await insurance_service.check_eligibility("p1", Decimal("5000"))


@pytest.mark.asyncio
async def test_inactive_policy_is_ignored(insurance_service, create_policy) -> None:
    """Only active policies count."""
    await create_policy(status=PolicyStatus.CANCELLED.value)

    with pytest.raises(NotFoundException, match="No active insurance policy found"):
        await insurance_service.check_eligibility("p1", Decimal("5000"))


@pytest.mark.asyncio
async def test_expired_policy(insurance_service, create_policy) -> None:
    """An active policy past its end date is reported as expired."""
    await create_policy(start_date=date(2024, 1, 1), end_date=date(2025, 6, 30))

    with pytest.raises(NotFoundException, match="expired"):
        await insurance_service.check_eligibility("p1", Decimal("5000"))


@pytest.mark.asyncio
async def test_policy_ending_today_still_covers(insurance_service, create_policy) -> None:
    """The end date itself is covered."""
    await create_policy(end_date=date(2025, 12, 1))

    result = await insurance_service.check_eligibility("p1", Decimal("100"))

    assert result.approved_amount == Decimal("70")


@pytest.mark.asyncio
async def test_policy_not_yet_started(insurance_service, create_policy) -> None:
    """A policy starting in the future does not cover today's claims."""
    await create_policy(start_date=date(2026, 1, 1), end_date=date(2027, 1, 1))

    with pytest.raises(NotFoundException, match="No active insurance policy found"):
        await insurance_service.check_eligibility("p1", Decimal("5000"))


@pytest.mark.asyncio
async def test_best_policy_wins(insurance_service, create_policy) -> None:
    """With several current policies the highest coverage is used."""
    await create_policy(coverage_percentage=Decimal("50"))
    await create_policy(coverage_percentage=Decimal("80"))
    await create_policy(
        coverage_percentage=Decimal("100"),
        start_date=date(2024, 1, 1),
        end_date=date(2025, 1, 1),
    )

    result = await insurance_service.check_eligibility("p1", Decimal("1000"))

    assert result.coverage_percentage == Decimal("80")
    assert result.approved_amount == Decimal("800")


@pytest.mark.asyncio
async def test_policies_are_per_patient(insurance_service, create_policy) -> None:
    """Another patient's policy does not apply."""
    await create_policy(patient_id="p2")

    with pytest.raises(NotFoundException):
        await insurance_service.check_eligibility("p1", Decimal("5000"))

    policies = await insurance_service.get_patient_policies("p2")
    assert len(policies) == 1
    assert policies[0].status == PolicyStatus.ACTIVE


@pytest.mark.asyncio
async def test_submit_claim(insurance_service, create_policy, notifier) -> None:
    """Claims start submitted with the covered amount pre-computed."""
    policy = await create_policy()
    payment_id = uuid4()

    claim = await insurance_service.submit_claim(policy["id"], payment_id, Decimal("5000"))

    assert claim.status == ClaimStatus.SUBMITTED
    assert claim.payment_id == payment_id
    assert claim.approved_amount == Decimal("3500")
    assert claim.processed_at is None
    assert notifier.events[-1] == ("insurance_claim_update", (str(claim.id), "submitted"))


@pytest.mark.asyncio
async def test_submit_claim_unknown_policy(insurance_service) -> None:
    """Claims need an existing policy."""
    with pytest.raises(NotFoundException):
        await insurance_service.submit_claim(uuid4(), uuid4(), Decimal("100"))


@pytest.mark.asyncio
async def test_submit_claim_requires_positive_amount(insurance_service, create_policy) -> None:
    """Zero claims are rejected."""
    policy = await create_policy()

    with pytest.raises(ValidationException):
        await insurance_service.submit_claim(policy["id"], uuid4(), Decimal("0"))


@pytest.mark.asyncio
async def test_approve_claim(insurance_service, create_policy, notifier) -> None:
    """Approval keeps the approved amount and stamps processed_at."""
    policy = await create_policy()
    claim = await insurance_service.submit_claim(policy["id"], uuid4(), Decimal("1000"))

    approved = await insurance_service.update_claim_status(claim.id, ClaimStatus.APPROVED)

    assert approved.status == ClaimStatus.APPROVED
    assert approved.approved_amount == Decimal("700")
    assert approved.processed_at is not None
    assert notifier.events[-1] == ("insurance_claim_update", (str(claim.id), "approved"))


@pytest.mark.asyncio
async def test_reject_claim_zeroes_approved_amount(insurance_service, create_policy) -> None:
    """A rejected claim approves nothing."""
    policy = await create_policy()
    claim = await insurance_service.submit_claim(policy["id"], uuid4(), Decimal("1000"))

    rejected = await insurance_service.update_claim_status(claim.id, ClaimStatus.REJECTED)

    assert rejected.status == ClaimStatus.REJECTED
    assert rejected.approved_amount == Decimal("0")


@pytest.mark.asyncio
async def test_claim_decided_once(insurance_service, create_policy) -> None:
    """A decided claim cannot be decided again."""
    policy = await create_policy()
    claim = await insurance_service.submit_claim(policy["id"], uuid4(), Decimal("1000"))
    await insurance_service.update_claim_status(claim.id, ClaimStatus.APPROVED)

    with pytest.raises(ValidationException, match="already been processed"):
        await insurance_service.update_claim_status(claim.id, ClaimStatus.REJECTED)


@pytest.mark.asyncio
async def test_claim_cannot_return_to_submitted(insurance_service, create_policy) -> None:
    """Submitted is not a decision."""
    policy = await create_policy()
    claim = await insurance_service.submit_claim(policy["id"], uuid4(), Decimal("1000"))

    with pytest.raises(ValidationException):
        await insurance_service.update_claim_status(claim.id, ClaimStatus.SUBMITTED)


@pytest.mark.asyncio
async def test_update_unknown_claim(insurance_service) -> None:
    """Unknown claims raise NotFoundException."""
    with pytest.raises(NotFoundException):
        await insurance_service.update_claim_status(uuid4(), ClaimStatus.APPROVED)
