"""Card payment gateway abstraction and its mock implementation."""

import random
import uuid
from decimal import Decimal
from typing import Any, Protocol

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class PaymentGatewayError(Exception):
    """Raised when the gateway cannot be reached or errors out."""


class GatewayResult(BaseModel):
    """Outcome of a charge attempt."""

    success: bool
    transaction_id: str | None = None
    error: str | None = None


class PaymentGateway(Protocol):
    """Charges a card for a given amount."""

    async def charge(self, amount: Decimal, details: dict[str, Any] | None) -> GatewayResult: ...


def generate_transaction_id() -> str:
    """Generate a transaction reference."""
    return f"TXN{uuid.uuid4().hex[:16].upper()}"


class MockPaymentGateway:
    """
    Stand-in gateway that approves a configurable share of charges.

    Args:
        success_rate: Probability of approval, between 0 and 1
        rng: Random source; pass a seeded ``random.Random`` for repeatable runs
    """

    def __init__(self, success_rate: float = 0.9, rng: random.Random | None = None):
        """Initialize gateway with approval rate and random source."""
        self.success_rate = success_rate
        self.rng = rng or random.Random()

    async def charge(self, amount: Decimal, details: dict[str, Any] | None) -> GatewayResult:
        """Approve or decline a charge."""
        if self.rng.random() < self.success_rate:
            result = GatewayResult(success=True, transaction_id=generate_transaction_id())
        else:
            result = GatewayResult(success=False, error="Payment declined")

        logger.info(
            "mock_gateway_charge",
            amount=str(amount),
            success=result.success,
            transaction_id=result.transaction_id,
        )
        return result
