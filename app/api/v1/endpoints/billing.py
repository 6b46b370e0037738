"""Billing endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.dependencies import BillingServiceDep
from app.schemas.payments import (
    BillCalculation,
    BillCalculationRequest,
    PaymentCreate,
    PaymentProcessRequest,
    PaymentResponse,
)

router = APIRouter()


@router.post(
    "/calculate",
    response_model=BillCalculation,
    status_code=status.HTTP_200_OK,
    tags=["Billing"],
    summary="Preview bill split",
)
async def calculate_bill(
    data: BillCalculationRequest,
    service: BillingServiceDep,
) -> BillCalculation:
    """
    Split a charge between insurance and the patient without saving anything.

    Returns:
        Amount, insurance coverage and patient portion
    """
    return await service.calculate_bill(data.appointment_id, data.base_amount, data.patient_id)


@router.post(
    "/",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Billing"],
    summary="Generate bill",
)
async def generate_bill(
    data: PaymentCreate,
    service: BillingServiceDep,
) -> PaymentResponse:
    """Create a pending payment for an appointment."""
    return await service.generate_bill(data)


@router.get(
    "/patients/{patient_id}",
    response_model=list[PaymentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Billing"],
    summary="List patient payments",
)
async def get_patient_payments(
    patient_id: str,
    service: BillingServiceDep,
) -> list[PaymentResponse]:
    """List a patient's payments, newest first."""
    return await service.get_patient_payments(patient_id)


@router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Billing"],
    summary="Get payment by ID",
)
async def get_payment(
    payment_id: UUID,
    service: BillingServiceDep,
) -> PaymentResponse:
    """Get a specific payment."""
    return await service.get_payment(payment_id)


@router.post(
    "/{payment_id}/process",
    response_model=PaymentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Billing"],
    summary="Settle payment",
)
async def process_payment(
    payment_id: UUID,
    data: PaymentProcessRequest,
    service: BillingServiceDep,
) -> PaymentResponse:
    """
    Settle a pending or failed payment.

    Args:
        payment_id: Payment ID
        data: Payment method and optional card details
        service: Billing service

    Returns:
        Completed payment
    """
    return await service.process_payment(payment_id, data.payment_method, data.payment_details)


@router.post(
    "/{payment_id}/fail",
    response_model=PaymentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Billing"],
    summary="Report payment failure",
)
async def report_payment_failure(
    payment_id: UUID,
    service: BillingServiceDep,
) -> PaymentResponse:
    """Record an asynchronous gateway failure for a payment."""
    return await service.handle_payment_failure(payment_id)
