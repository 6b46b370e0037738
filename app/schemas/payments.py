"""Payment schemas for billing requests and responses."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    """Payment status enumeration."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    """Payment method enumeration."""

    CASH = "cash"
    CARD = "card"
    MIXED = "mixed"
    PENDING = "pending"


class BillCalculationRequest(BaseModel):
    """Schema for a bill split preview."""

    appointment_id: UUID
    patient_id: str = Field(..., min_length=1)
    base_amount: Decimal = Field(..., gt=0)


class BillCalculation(BaseModel):
    """Split of a charge between insurance and the patient."""

    amount: Decimal
    insurance_coverage: Decimal
    patient_portion: Decimal


class PaymentCreate(BaseModel):
    """Schema for generating a bill.

    Amounts are validated by the billing service, not here, so that bad
    input surfaces as a ValidationException.
    """

    appointment_id: UUID | None = None
    patient_id: str = ""
    amount: Decimal = Decimal("0")
    insurance_coverage: Decimal = Decimal("0")
    patient_portion: Decimal = Decimal("0")
    payment_method: PaymentMethod = PaymentMethod.PENDING
    insurance_claim_id: str | None = None


class PaymentProcessRequest(BaseModel):
    """Schema for settling a payment."""

    payment_method: PaymentMethod
    payment_details: dict[str, Any] | None = None


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    id: UUID
    appointment_id: UUID
    patient_id: str
    amount: Decimal
    insurance_coverage: Decimal
    patient_portion: Decimal
    payment_method: PaymentMethod
    status: PaymentStatus
    transaction_id: str | None = None
    insurance_claim_id: str | None = None
    paid_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
