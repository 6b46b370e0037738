"""Tests for patient flow and revenue reports."""

import csv
import io
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.exceptions import ValidationException
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.payment_repository import PaymentRepository
from app.schemas.payments import PaymentCreate, PaymentMethod, PaymentStatus
from app.services.reporting_service import ReportingService


@pytest.fixture
def reporting_service(db_session) -> ReportingService:
    return ReportingService(AppointmentRepository(db_session), PaymentRepository(db_session))


async def _bill(billing_service, amount: str, coverage: str = "0"):
    return await billing_service.generate_bill(
        PaymentCreate(
            appointment_id=uuid4(),
            patient_id="p1",
            amount=Decimal(amount),
            insurance_coverage=Decimal(coverage),
            patient_portion=Decimal(amount) - Decimal(coverage),
        )
    )


@pytest.mark.asyncio
async def test_patient_flow_report(appointment_service, reporting_service, make_booking) -> None:
    """Counts appointments by status and department within the range."""
    await appointment_service.book_appointment(make_booking(time_slot="09:00"))
    confirmed = await appointment_service.book_appointment(make_booking(time_slot="09:30"))
    await appointment_service.confirm_appointment(confirmed.id)
    arrived = await appointment_service.book_appointment(
        make_booking(time_slot="10:00", department_id="neurology")
    )
    await appointment_service.check_in(arrived.id)
    seen = await appointment_service.book_appointment(make_booking(time_slot="10:30"))
    await appointment_service.check_in(seen.id)
    await appointment_service.complete_appointment(seen.id)
    dropped = await appointment_service.book_appointment(make_booking(time_slot="11:00"))
    await appointment_service.cancel_appointment(dropped.id)
    # Outside the range
    await appointment_service.book_appointment(make_booking(appointment_date=date(2025, 12, 28)))

    report = await reporting_service.patient_flow_report(date(2025, 12, 20), date(2025, 12, 21))

    assert report.total_appointments == 5
    assert report.scheduled_appointments == 2
    assert report.checked_in_appointments == 1
    assert report.completed_appointments == 1
    assert report.cancelled_appointments == 1
    assert [(d.department_id, d.appointment_count) for d in report.department_breakdown] == [
        ("cardiology", 4),
        ("neurology", 1),
    ]
    assert report.date_range.start == date(2025, 12, 20)


@pytest.mark.asyncio
async def test_patient_flow_report_empty(reporting_service) -> None:
    """An empty range reports zeros."""
    report = await reporting_service.patient_flow_report(date(2025, 1, 1), date(2025, 1, 31))

    assert report.total_appointments == 0
    assert report.department_breakdown == []


@pytest.mark.asyncio
async def test_revenue_report(billing_service, reporting_service) -> None:
    """Revenue counts completed payments only."""
    cash = await _bill(billing_service, "1000")
    await billing_service.process_payment(cash.id, PaymentMethod.CASH)

    card = await _bill(billing_service, "5000", coverage="3500")
    await billing_service.process_payment(card.id, PaymentMethod.CARD)

    await _bill(billing_service, "250")

    failed = await _bill(billing_service, "400")
    await billing_service.handle_payment_failure(failed.id)

    today = datetime.now(UTC).date()
    report = await reporting_service.revenue_report(today - timedelta(days=1), today)

    assert report.total_revenue == Decimal("6000")
    assert report.cash_payments == Decimal("1000")
    assert report.card_payments == Decimal("5000")
    assert report.insurance_payments == Decimal("3500")
    assert report.pending_payments == Decimal("250")
    assert report.refunds == Decimal("0")
    assert [(d.day, d.revenue, d.payment_count) for d in report.daily_breakdown] == [
        (today - timedelta(days=1), Decimal("0"), 0),
        (today, Decimal("6000"), 2),
    ]


@pytest.mark.asyncio
async def test_revenue_report_counts_refunds(db_session, billing_service, reporting_service) -> None:
    """Refunded payments are reported separately from revenue."""
    payment = await _bill(billing_service, "300")
    await PaymentRepository(db_session).update(
        payment.id, {"status": PaymentStatus.REFUNDED.value}
    )

    today = datetime.now(UTC).date()
    report = await reporting_service.revenue_report(today, today + timedelta(days=1))

    assert report.refunds == Decimal("300")
    assert report.total_revenue == Decimal("0")
    assert [(d.day, d.revenue, d.payment_count) for d in report.daily_breakdown] == [
        (today, Decimal("0"), 0),
        (today + timedelta(days=1), Decimal("0"), 0),
    ]


@pytest.mark.asyncio
async def test_report_range_must_be_ordered(reporting_service) -> None:
    """End dates before the start are rejected."""
    with pytest.raises(ValidationException):
        await reporting_service.patient_flow_report(date(2025, 12, 2), date(2025, 12, 1))

    with pytest.raises(ValidationException):
        await reporting_service.revenue_report(date(2025, 12, 2), date(2025, 12, 1))


@pytest.mark.asyncio
async def test_daily_revenue_follows_payment_date(
    db_session, billing_service, reporting_service
) -> None:
    """Revenue lands on the day a bill was paid, not the day it was generated."""
    today = datetime.now(UTC).date()
    repository = PaymentRepository(db_session)

    late = await _bill(billing_service, "700")
    await billing_service.process_payment(late.id, PaymentMethod.CASH)
    await repository.update(
        late.id, {"paid_at": datetime.combine(today + timedelta(days=1), time(10, 0), tzinfo=UTC)}
    )

    # Completed without a payment date
    undated = await _bill(billing_service, "50")
    await billing_service.process_payment(undated.id, PaymentMethod.CASH)
    await repository.update(undated.id, {"paid_at": None})

    # Claimed but not yet settled
    in_flight = await _bill(billing_service, "20")
    await repository.claim_for_processing(in_flight.id)

    report = await reporting_service.revenue_report(today, today + timedelta(days=2))

    assert report.total_revenue == Decimal("750")
    assert report.pending_payments == Decimal("20")
    assert [(d.day, d.revenue, d.payment_count) for d in report.daily_breakdown] == [
        (today, Decimal("0"), 0),
        (today + timedelta(days=1), Decimal("700"), 1),
        (today + timedelta(days=2), Decimal("0"), 0),
    ]


@pytest.mark.asyncio
async def test_single_day_revenue_report(reporting_service) -> None:
    """A one-day range has exactly one zero-filled entry."""
    report = await reporting_service.revenue_report(date(2025, 3, 1), date(2025, 3, 1))

    assert len(report.daily_breakdown) == 1
    assert report.daily_breakdown[0].day == date(2025, 3, 1)
    assert report.daily_breakdown[0].revenue == Decimal("0")


@pytest.mark.asyncio
async def test_export_revenue_report(billing_service, reporting_service) -> None:
    """Revenue exports one Metric,Value row per total."""
    card = await _bill(billing_service, "5000", coverage="3500")
    await billing_service.process_payment(card.id, PaymentMethod.CARD)
    await _bill(billing_service, "250")

    today = datetime.now(UTC).date()
    report = await reporting_service.revenue_report(today - timedelta(days=1), today)

    rows = list(csv.reader(io.StringIO(reporting_service.export_report(report, "CSV"))))

    assert rows == [
        ["Metric", "Value"],
        ["Total Revenue", str(report.total_revenue)],
        ["Cash Payments", str(report.cash_payments)],
        ["Card Payments", str(report.card_payments)],
        ["Insurance Payments", str(report.insurance_payments)],
        ["Pending Payments", str(report.pending_payments)],
        ["Refunds", str(report.refunds)],
    ]
    assert Decimal(rows[1][1]) == Decimal("5000")
    assert Decimal(rows[5][1]) == Decimal("250")


@pytest.mark.asyncio
async def test_export_patient_flow_report(
    appointment_service, reporting_service, make_booking
) -> None:
    """Patient flow exports appointment counts by status."""
    await appointment_service.book_appointment(make_booking(time_slot="09:00"))
    dropped = await appointment_service.book_appointment(make_booking(time_slot="09:30"))
    await appointment_service.cancel_appointment(dropped.id)

    report = await reporting_service.patient_flow_report(date(2025, 12, 20), date(2025, 12, 21))

    assert reporting_service.export_report(report, "csv") == (
        "Metric,Value\n"
        "Total Appointments,2\n"
        "Scheduled,1\n"
        "Checked In,0\n"
        "Completed,0\n"
        "Cancelled,1\n"
    )


@pytest.mark.asyncio
async def test_export_rejects_unknown_format(reporting_service) -> None:
    """Only CSV exports are produced."""
    report = await reporting_service.patient_flow_report(date(2025, 1, 1), date(2025, 1, 31))

    with pytest.raises(ValidationException, match="Unsupported export format"):
        reporting_service.export_report(report, "pdf")
