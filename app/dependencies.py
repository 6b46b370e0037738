"""FastAPI dependencies building request-scoped services."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.insurance_repository import InsuranceRepository
from app.repositories.payment_repository import PaymentRepository
from app.services.appointment_service import AppointmentService
from app.services.billing_service import BillingService
from app.services.insurance_service import InsuranceService
from app.services.notification_service import LoggingNotificationSink, NotificationSink
from app.services.payment_gateway import MockPaymentGateway, PaymentGateway
from app.services.reporting_service import ReportingService

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def get_notification_sink() -> NotificationSink:
    """Provide the notification sink."""
    return LoggingNotificationSink()


@lru_cache
def get_payment_gateway() -> PaymentGateway:
    """Provide the card payment gateway."""
    return MockPaymentGateway(success_rate=settings.payment_gateway_success_rate)


Notifier = Annotated[NotificationSink, Depends(get_notification_sink)]
Gateway = Annotated[PaymentGateway, Depends(get_payment_gateway)]


def get_appointment_service(db: DatabaseSession, notifier: Notifier) -> AppointmentService:
    """Build the scheduling service for this request."""
    return AppointmentService(AppointmentRepository(db), notifier)


def get_insurance_service(db: DatabaseSession, notifier: Notifier) -> InsuranceService:
    """Build the insurance service for this request."""
    return InsuranceService(InsuranceRepository(db), notifier)


InsuranceServiceDep = Annotated[InsuranceService, Depends(get_insurance_service)]


def get_billing_service(
    db: DatabaseSession,
    insurance_service: InsuranceServiceDep,
    notifier: Notifier,
    gateway: Gateway,
) -> BillingService:
    """Build the billing service for this request."""
    return BillingService(PaymentRepository(db), insurance_service, notifier, gateway)


def get_reporting_service(db: DatabaseSession) -> ReportingService:
    """Build the reporting service for this request."""
    return ReportingService(AppointmentRepository(db), PaymentRepository(db))


# Type aliases for dependency injection
AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
BillingServiceDep = Annotated[BillingService, Depends(get_billing_service)]
ReportingServiceDep = Annotated[ReportingService, Depends(get_reporting_service)]
