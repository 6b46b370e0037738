"""Reporting service for patient flow and revenue summaries."""

import csv
import io
from collections import Counter, defaultdict
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal

from app.core.exceptions import ValidationException
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.payment_repository import PaymentRepository
from app.schemas.appointments import AppointmentStatus
from app.schemas.payments import PaymentMethod, PaymentStatus
from app.schemas.reports import (
    DailyRevenue,
    DateRange,
    DepartmentStats,
    PatientFlowReport,
    ReportFormat,
    RevenueReport,
)


class ReportingService:
    """Service for operational reports."""

    def __init__(
        self,
        appointment_repository: AppointmentRepository,
        payment_repository: PaymentRepository,
    ):
        """Initialize service with the appointment and payment stores."""
        self.appointment_repository = appointment_repository
        self.payment_repository = payment_repository

    async def patient_flow_report(self, start: date, end: date) -> PatientFlowReport:
        """
        Summarize appointment volume between two dates, inclusive.

        Raises:
            ValidationException: If end is before start
        """
        _check_range(start, end)
        rows = await self.appointment_repository.list_by_date_range(start, end)

        statuses = Counter(row["status"] for row in rows)
        departments = Counter(row["department_id"] for row in rows)

        return PatientFlowReport(
            total_appointments=len(rows),
            scheduled_appointments=statuses[AppointmentStatus.SCHEDULED.value]
            + statuses[AppointmentStatus.CONFIRMED.value],
            checked_in_appointments=statuses[AppointmentStatus.CHECKED_IN.value],
            completed_appointments=statuses[AppointmentStatus.COMPLETED.value],
            cancelled_appointments=statuses[AppointmentStatus.CANCELLED.value],
            department_breakdown=[
                DepartmentStats(department_id=department_id, appointment_count=count)
                for department_id, count in sorted(departments.items())
            ],
            date_range=DateRange(start=start, end=end),
        )

    async def revenue_report(self, start: date, end: date) -> RevenueReport:
        """
        Summarize payments created between two dates, inclusive.

        Revenue counts completed payments only; pending and refunded
        amounts are reported separately. The daily breakdown has one entry
        per date in the range and places each completed payment on the day
        it was paid.

        Raises:
            ValidationException: If end is before start
        """
        _check_range(start, end)
        rows = await self.payment_repository.list_by_date_range(
            datetime.combine(start, time.min, tzinfo=UTC),
            datetime.combine(end, time.max, tzinfo=UTC),
        )

        totals: dict[str, Decimal] = defaultdict(Decimal)
        daily = {
            start + timedelta(days=offset): DailyRevenue(
                day=start + timedelta(days=offset), revenue=Decimal("0"), payment_count=0
            )
            for offset in range((end - start).days + 1)
        }

        for row in rows:
            status = row["status"]
            amount = Decimal(row["amount"])

            if status == PaymentStatus.COMPLETED.value:
                totals["revenue"] += amount
                totals["insurance"] += Decimal(row["insurance_coverage"])
                if row["payment_method"] == PaymentMethod.CASH.value:
                    totals["cash"] += amount
                elif row["payment_method"] == PaymentMethod.CARD.value:
                    totals["card"] += amount
                if row["paid_at"] is not None:
                    entry = daily.get(row["paid_at"].date())
                    if entry is not None:
                        entry.revenue += amount
                        entry.payment_count += 1
            elif status in (PaymentStatus.PENDING.value, PaymentStatus.PROCESSING.value):
                totals["pending"] += amount
            elif status == PaymentStatus.REFUNDED.value:
                totals["refunds"] += amount

        return RevenueReport(
            total_revenue=totals["revenue"],
            cash_payments=totals["cash"],
            card_payments=totals["card"],
            insurance_payments=totals["insurance"],
            pending_payments=totals["pending"],
            refunds=totals["refunds"],
            daily_breakdown=list(daily.values()),
            date_range=DateRange(start=start, end=end),
        )

    def export_report(self, report: PatientFlowReport | RevenueReport, format: str) -> str:
        """
        Render a report as CSV with one ``Metric,Value`` row per figure.

        Args:
            report: Patient flow or revenue report
            format: Export format, case-insensitive

        Returns:
            The CSV document

        Raises:
            ValidationException: If the format is not supported
        """
        if str(format).lower() != ReportFormat.CSV.value:
            raise ValidationException(f"Unsupported export format: {format}")

        if isinstance(report, PatientFlowReport):
            metrics = [
                ("Total Appointments", report.total_appointments),
                ("Scheduled", report.scheduled_appointments),
                ("Checked In", report.checked_in_appointments),
                ("Completed", report.completed_appointments),
                ("Cancelled", report.cancelled_appointments),
            ]
        else:
            metrics = [
                ("Total Revenue", report.total_revenue),
                ("Cash Payments", report.cash_payments),
                ("Card Payments", report.card_payments),
                ("Insurance Payments", report.insurance_payments),
                ("Pending Payments", report.pending_payments),
                ("Refunds", report.refunds),
            ]

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["Metric", "Value"])
        writer.writerows(metrics)
        return buffer.getvalue()


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationException("End date must not be before start date")
