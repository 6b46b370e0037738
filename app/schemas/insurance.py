"""Insurance schemas."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PolicyStatus(str, Enum):
    """Insurance policy status enumeration."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ClaimStatus(str, Enum):
    """Insurance claim status enumeration."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class InsurancePolicyResponse(BaseModel):
    """Schema for insurance policy response."""

    id: UUID
    patient_id: str
    policy_number: str
    provider: str
    coverage_percentage: Decimal
    max_coverage: Decimal
    start_date: date
    end_date: date
    status: PolicyStatus

    model_config = {"from_attributes": True}


class EligibilityRequest(BaseModel):
    """Schema for an eligibility check."""

    patient_id: str = Field(..., min_length=1)
    claim_amount: Decimal = Field(..., gt=0)


class EligibilityResponse(BaseModel):
    """Result of an eligibility check."""

    eligible: bool
    coverage_percentage: Decimal
    approved_amount: Decimal
    claim_id: str


class ClaimCreate(BaseModel):
    """Schema for submitting an insurance claim."""

    policy_id: UUID
    payment_id: UUID
    claim_amount: Decimal = Field(..., gt=0)


class ClaimStatusUpdate(BaseModel):
    """Schema for recording the insurer's decision on a claim."""

    status: ClaimStatus


class InsuranceClaimResponse(BaseModel):
    """Schema for insurance claim response."""

    id: UUID
    policy_id: UUID
    payment_id: UUID
    claim_amount: Decimal
    approved_amount: Decimal
    status: ClaimStatus
    submitted_at: datetime
    processed_at: datetime | None = None

    model_config = {"from_attributes": True}
