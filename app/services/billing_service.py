"""Billing service: bill calculation, generation and payment settlement."""

from decimal import Decimal
from typing import Any
from uuid import UUID

import structlog

from app.core.exceptions import NotFoundException, ValidationException
from app.repositories.payment_repository import PaymentRepository, check_cents, check_split
from app.schemas.payments import (
    BillCalculation,
    PaymentCreate,
    PaymentMethod,
    PaymentResponse,
    PaymentStatus,
)
from app.services.insurance_service import InsuranceService
from app.services.notification_service import NotificationSink, notify
from app.services.payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    generate_transaction_id,
)

logger = structlog.get_logger(__name__)


class BillingService:
    """Service for billing patients and settling their payments."""

    def __init__(
        self,
        repository: PaymentRepository,
        insurance_service: InsuranceService,
        notifier: NotificationSink,
        gateway: PaymentGateway,
    ):
        """Initialize service with its collaborators."""
        self.repository = repository
        self.insurance_service = insurance_service
        self.notifier = notifier
        self.gateway = gateway

    async def calculate_bill(
        self,
        appointment_id: UUID,
        base_amount: Decimal,
        patient_id: str,
    ) -> BillCalculation:
        """
        Split a charge between the patient's insurance and the patient.

        Has no side effects. A patient without an eligible policy pays the
        whole amount.

        Args:
            appointment_id: Appointment being billed
            base_amount: Total charge
            patient_id: Patient ID

        Returns:
            The amount, insurance coverage and patient portion

        Raises:
            ValidationException: If the amount is not positive or not in whole cents
        """
        base_amount = Decimal(base_amount)
        if base_amount <= 0:
            raise ValidationException("Valid amount is required")
        check_cents(base_amount)
        try:
            eligibility = await self.insurance_service.check_eligibility(patient_id, base_amount)
        except NotFoundException:
            # No insurance is the common case, not an error
            logger.info(
                "bill_calculated_without_insurance",
                appointment_id=str(appointment_id),
                patient_id=patient_id,
            )
            return BillCalculation(
                amount=base_amount,
                insurance_coverage=Decimal("0"),
                patient_portion=base_amount,
            )

        insurance_coverage = min(eligibility.approved_amount, base_amount)
        return BillCalculation(
            amount=base_amount,
            insurance_coverage=insurance_coverage,
            patient_portion=base_amount - insurance_coverage,
        )

    async def generate_bill(self, data: PaymentCreate) -> PaymentResponse:
        """
        Create a pending payment for an appointment.

        Raises:
            ValidationException: If the bill data is invalid
        """
        self._validate_payment_data(data)

        row = await self.repository.create(
            {
                "appointment_id": data.appointment_id,
                "patient_id": data.patient_id,
                "amount": data.amount,
                "insurance_coverage": data.insurance_coverage,
                "patient_portion": data.patient_portion,
                "payment_method": data.payment_method.value,
                "insurance_claim_id": data.insurance_claim_id,
            }
        )
        logger.info(
            "bill_generated",
            payment_id=str(row["id"]),
            appointment_id=str(data.appointment_id),
            amount=str(data.amount),
        )
        return PaymentResponse.model_validate(row)

    async def get_payment(self, payment_id: UUID) -> PaymentResponse:
        """
        Get payment by ID.

        Raises:
            NotFoundException: If payment not found
        """
        row = await self.repository.get(payment_id)
        if not row:
            raise NotFoundException("Payment not found")
        return PaymentResponse.model_validate(row)

    async def get_patient_payments(self, patient_id: str) -> list[PaymentResponse]:
        """List a patient's payments, newest first."""
        rows = await self.repository.list_by_patient(patient_id)
        return [PaymentResponse.model_validate(row) for row in rows]

    async def process_payment(
        self,
        payment_id: UUID,
        payment_method: PaymentMethod,
        payment_details: dict[str, Any] | None = None,
    ) -> PaymentResponse:
        """
        Settle a pending or previously failed payment.

        The payment is first claimed by moving it to processing, so racing
        calls charge the gateway at most once. Card payments go through the
        payment gateway; other methods are settled directly. A completed
        payment can never be settled again.

        Raises:
            NotFoundException: If payment not found
            ValidationException: If the payment is already settled or being
                processed, or the charge fails
        """
        payment = await self.repository.get(payment_id)
        if not payment:
            raise NotFoundException("Payment not found")

        self._check_settleable(payment["status"])
        if payment_method == PaymentMethod.PENDING:
            raise ValidationException("A settlement payment method is required")

        # Only the caller that wins the claim may charge the patient
        claimed = await self.repository.claim_for_processing(payment_id)
        if claimed is None:
            current = await self.repository.get(payment_id)
            self._check_settleable(current["status"])
            raise ValidationException("Payment is already being processed")

        if payment_method == PaymentMethod.CARD:
            try:
                result = await self.gateway.charge(payment["patient_portion"], payment_details)
            except PaymentGatewayError as e:
                logger.error("payment_gateway_error", payment_id=str(payment_id), error=str(e))
                await self.handle_payment_failure(payment_id)
                raise ValidationException("Payment processing failed") from e

            if not result.success:
                logger.info(
                    "payment_declined",
                    payment_id=str(payment_id),
                    error=result.error,
                )
                await self.handle_payment_failure(payment_id)
                raise ValidationException("Payment processing failed")

            transaction_id = result.transaction_id or generate_transaction_id()
        else:
            transaction_id = generate_transaction_id()

        row = await self.repository.mark_completed(payment_id, payment_method, transaction_id)
        if row is None:
            # A failure report released the claim while the charge was in flight
            logger.error(
                "payment_settlement_lost",
                payment_id=str(payment_id),
                payment_method=payment_method.value,
                transaction_id=transaction_id,
            )
            raise ValidationException("Payment is no longer being processed")

        logger.info(
            "payment_completed",
            payment_id=str(payment_id),
            payment_method=payment_method.value,
            transaction_id=transaction_id,
        )

        await notify(self.notifier.send_payment_confirmation, row)

        return PaymentResponse.model_validate(row)

    async def handle_payment_failure(self, payment_id: UUID) -> PaymentResponse:
        """
        Mark a payment as failed and notify the patient.

        Also the entry point for asynchronous gateway failure reports, and
        releases a payment left in processing by an interrupted settlement.

        Raises:
            NotFoundException: If payment not found
            ValidationException: If the payment is completed or refunded
        """
        row = await self.repository.mark_failed(payment_id)
        if row is None:
            if not await self.repository.get(payment_id):
                raise NotFoundException("Payment not found")
            raise ValidationException("Settled payments cannot be marked as failed")

        logger.info("payment_failed", payment_id=str(payment_id))

        await notify(self.notifier.send_payment_failure_notification, row)

        return PaymentResponse.model_validate(row)

    def _check_settleable(self, status: str) -> None:
        if status == PaymentStatus.COMPLETED.value:
            raise ValidationException("Payment already completed")
        if status == PaymentStatus.REFUNDED.value:
            raise ValidationException("Payment has been refunded")
        if status == PaymentStatus.PROCESSING.value:
            raise ValidationException("Payment is already being processed")

    def _validate_payment_data(self, data: PaymentCreate) -> None:
        if not data.appointment_id or not data.patient_id:
            raise ValidationException("Appointment and patient are required")
        if data.amount is None or data.amount <= 0:
            raise ValidationException("Valid amount is required")
        if data.patient_portion is None or data.patient_portion < 0:
            raise ValidationException("Valid patient portion is required")
        if data.insurance_coverage is None or data.insurance_coverage < 0:
            raise ValidationException("Valid insurance coverage is required")
        check_split(data.amount, data.insurance_coverage, data.patient_portion)
