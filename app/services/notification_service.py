"""Notification sink for appointment, payment and insurance events."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)


class NotificationSink(Protocol):
    """Receives lifecycle events for delivery to patients."""

    async def send_appointment_confirmation(self, appointment: dict[str, Any]) -> None: ...

    async def send_check_in_notification(self, appointment: dict[str, Any]) -> None: ...

    async def send_cancellation_notification(self, appointment: dict[str, Any]) -> None: ...

    async def send_reschedule_notification(self, appointment: dict[str, Any]) -> None: ...

    async def send_payment_confirmation(self, payment: dict[str, Any]) -> None: ...

    async def send_payment_failure_notification(self, payment: dict[str, Any]) -> None: ...

    async def send_insurance_claim_update(self, claim_id: str, status: str) -> None: ...


class LoggingNotificationSink:
    """Notification sink that records each event in the structured log."""

    async def send_appointment_confirmation(self, appointment: dict[str, Any]) -> None:
        """Log a booking confirmation."""
        logger.info(
            "appointment_confirmation_sent",
            appointment_id=str(appointment["id"]),
            patient_id=appointment["patient_id"],
            appointment_date=str(appointment["appointment_date"]),
            time_slot=appointment["time_slot"],
        )

    async def send_check_in_notification(self, appointment: dict[str, Any]) -> None:
        """Log a check-in."""
        logger.info(
            "check_in_notification_sent",
            appointment_id=str(appointment["id"]),
            patient_id=appointment["patient_id"],
        )

    async def send_cancellation_notification(self, appointment: dict[str, Any]) -> None:
        """Log a cancellation."""
        logger.info(
            "cancellation_notification_sent",
            appointment_id=str(appointment["id"]),
            patient_id=appointment["patient_id"],
        )

    async def send_reschedule_notification(self, appointment: dict[str, Any]) -> None:
        """Log a reschedule."""
        logger.info(
            "reschedule_notification_sent",
            appointment_id=str(appointment["id"]),
            patient_id=appointment["patient_id"],
            appointment_date=str(appointment["appointment_date"]),
            time_slot=appointment["time_slot"],
        )

    async def send_payment_confirmation(self, payment: dict[str, Any]) -> None:
        """Log a successful payment."""
        logger.info(
            "payment_confirmation_sent",
            payment_id=str(payment["id"]),
            patient_id=payment["patient_id"],
            amount=str(payment["amount"]),
            status=payment["status"],
        )

    async def send_payment_failure_notification(self, payment: dict[str, Any]) -> None:
        """Log a failed payment."""
        logger.info(
            "payment_failure_notification_sent",
            payment_id=str(payment["id"]),
            patient_id=payment["patient_id"],
        )

    async def send_insurance_claim_update(self, claim_id: str, status: str) -> None:
        """Log an insurance claim status change."""
        logger.info("insurance_claim_update_sent", claim_id=claim_id, status=status)


async def notify(
    send: Callable[..., Awaitable[None]],
    *args: Any,
) -> None:
    """
    Deliver one event without letting sink errors reach the caller.

    Args:
        send: Bound sink method
        *args: Event payload
    """
    try:
        await send(*args)
    except Exception as e:
        # Log error but don't fail the request
        logger.warning(
            "failed_to_send_notification",
            notification=getattr(send, "__name__", repr(send)),
            error=str(e),
        )
