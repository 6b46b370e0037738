import os
from collections.abc import AsyncGenerator
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import uuid4

# Point the application engine at SQLite before any app module is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import get_db
from app.dependencies import get_notification_sink, get_payment_gateway
from app.main import app
from app.models import metadata
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.insurance_repository import InsuranceRepository
from app.repositories.payment_repository import PaymentRepository
from app.schemas.appointments import AppointmentCreate
from app.schemas.insurance import PolicyStatus
from app.services.appointment_service import AppointmentService
from app.services.billing_service import BillingService
from app.services.insurance_service import InsuranceService
from app.services.payment_gateway import GatewayResult

# In-memory SQLite keeps the partial unique index and check constraints real
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Fixed clinic clock used by the service-level tests
FIXED_NOW = datetime(2025, 12, 1, 8, 0, 0)
FIXED_TODAY = FIXED_NOW.date()


class RecordingNotificationSink:
    """Notification sink that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    async def send_appointment_confirmation(self, appointment: dict[str, Any]) -> None:
        self.events.append(("appointment_confirmation", appointment))

    async def send_check_in_notification(self, appointment: dict[str, Any]) -> None:
        self.events.append(("check_in", appointment))

    async def send_cancellation_notification(self, appointment: dict[str, Any]) -> None:
        self.events.append(("cancellation", appointment))

    async def send_reschedule_notification(self, appointment: dict[str, Any]) -> None:
        self.events.append(("reschedule", appointment))

    async def send_payment_confirmation(self, payment: dict[str, Any]) -> None:
        self.events.append(("payment_confirmation", payment))

    async def send_payment_failure_notification(self, payment: dict[str, Any]) -> None:
        self.events.append(("payment_failure", payment))

    async def send_insurance_claim_update(self, claim_id: str, status: str) -> None:
        self.events.append(("insurance_claim_update", (claim_id, status)))


class StubPaymentGateway:
    """Deterministic gateway: approves unless told otherwise."""

    def __init__(self) -> None:
        self.approve = True
        self.error: Exception | None = None
        self.charges: list[tuple[Decimal, dict[str, Any] | None]] = []

    async def charge(self, amount: Decimal, details: dict[str, Any] | None) -> GatewayResult:
        self.charges.append((amount, details))
        if self.error is not None:
            raise self.error
        if self.approve:
            return GatewayResult(success=True, transaction_id=f"TXN-STUB-{len(self.charges)}")
        return GatewayResult(success=False, error="Payment declined")


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def gateway() -> StubPaymentGateway:
    return StubPaymentGateway()


@pytest.fixture
def appointment_service(db_session, notifier) -> AppointmentService:
    """Scheduling service with a clinic clock frozen at FIXED_NOW."""
    return AppointmentService(
        AppointmentRepository(db_session),
        notifier,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def insurance_service(db_session, notifier) -> InsuranceService:
    return InsuranceService(InsuranceRepository(db_session), notifier, today=lambda: FIXED_TODAY)


@pytest.fixture
def billing_service(db_session, insurance_service, notifier, gateway) -> BillingService:
    return BillingService(PaymentRepository(db_session), insurance_service, notifier, gateway)


@pytest.fixture
def make_booking():
    """Build booking data with sensible defaults."""

    def _make(**overrides: Any) -> AppointmentCreate:
        data: dict[str, Any] = {
            "patient_id": "p1",
            "doctor_id": "d1",
            "department_id": "cardiology",
            "appointment_date": date(2025, 12, 20),
            "time_slot": "10:00",
            "reason": "Regular checkup",
            "notes": None,
        }
        data.update(overrides)
        return AppointmentCreate(**data)

    return _make


@pytest.fixture
def create_policy(db_session):
    """Insert an insurance policy for a patient."""

    async def _create(patient_id: str = "p1", **overrides: Any) -> dict[str, Any]:
        values: dict[str, Any] = {
            "patient_id": patient_id,
            "policy_number": f"POL-{uuid4().hex[:10].upper()}",
            "provider": "Acme Health",
            "coverage_percentage": Decimal("70"),
            "max_coverage": Decimal("10000"),
            "start_date": date(2025, 1, 1),
            "end_date": date(2026, 1, 1),
            "status": PolicyStatus.ACTIVE.value,
        }
        values.update(overrides)
        return await InsuranceRepository(db_session).create_policy(values)

    return _create


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    notifier: RecordingNotificationSink,
    gateway: StubPaymentGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sink] = lambda: notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def future_date() -> date:
    """A date safely ahead of the real clinic clock, for endpoint tests."""
    return date.today() + timedelta(days=30)
