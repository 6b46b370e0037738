"""Database models."""

from app.models.appointments import appointments, metadata
from app.models.insurance import insurance_claims, insurance_policies
from app.models.payments import payments

__all__ = [
    "appointments",
    "insurance_claims",
    "insurance_policies",
    "metadata",
    "payments",
]
