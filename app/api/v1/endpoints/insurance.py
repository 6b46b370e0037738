"""Insurance endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.dependencies import InsuranceServiceDep
from app.schemas.insurance import (
    ClaimCreate,
    ClaimStatusUpdate,
    EligibilityRequest,
    EligibilityResponse,
    InsuranceClaimResponse,
    InsurancePolicyResponse,
)

router = APIRouter()


@router.post(
    "/eligibility",
    response_model=EligibilityResponse,
    status_code=status.HTTP_200_OK,
    tags=["Insurance"],
    summary="Check insurance eligibility",
)
async def check_eligibility(
    data: EligibilityRequest,
    service: InsuranceServiceDep,
) -> EligibilityResponse:
    """Check how much of a claim the patient's active policy covers."""
    return await service.check_eligibility(data.patient_id, data.claim_amount)


@router.get(
    "/patients/{patient_id}/policies",
    response_model=list[InsurancePolicyResponse],
    status_code=status.HTTP_200_OK,
    tags=["Insurance"],
    summary="List patient policies",
)
async def get_patient_policies(
    patient_id: str,
    service: InsuranceServiceDep,
) -> list[InsurancePolicyResponse]:
    """List all of a patient's insurance policies."""
    return await service.get_patient_policies(patient_id)


@router.post(
    "/claims",
    response_model=InsuranceClaimResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Insurance"],
    summary="Submit insurance claim",
)
async def submit_claim(
    data: ClaimCreate,
    service: InsuranceServiceDep,
) -> InsuranceClaimResponse:
    """Submit a claim against a policy for a payment."""
    return await service.submit_claim(data.policy_id, data.payment_id, data.claim_amount)


@router.patch(
    "/claims/{claim_id}",
    response_model=InsuranceClaimResponse,
    status_code=status.HTTP_200_OK,
    tags=["Insurance"],
    summary="Record claim decision",
)
async def update_claim_status(
    claim_id: UUID,
    data: ClaimStatusUpdate,
    service: InsuranceServiceDep,
) -> InsuranceClaimResponse:
    """Record the insurer's decision on a submitted claim."""
    return await service.update_claim_status(claim_id, data.status)
