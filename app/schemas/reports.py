"""Reporting schemas."""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class DateRange(BaseModel):
    """Inclusive date range of a report."""

    start: date
    end: date


class DepartmentStats(BaseModel):
    """Appointment count for one department."""

    department_id: str
    appointment_count: int


class PatientFlowReport(BaseModel):
    """Appointment volume over a date range."""

    total_appointments: int
    scheduled_appointments: int
    checked_in_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    department_breakdown: list[DepartmentStats]
    date_range: DateRange


class DailyRevenue(BaseModel):
    """Completed revenue for a single day."""

    day: date
    revenue: Decimal
    payment_count: int


class RevenueReport(BaseModel):
    """Payment totals over a date range."""

    total_revenue: Decimal
    cash_payments: Decimal
    card_payments: Decimal
    insurance_payments: Decimal
    pending_payments: Decimal
    refunds: Decimal
    daily_breakdown: list[DailyRevenue]
    date_range: DateRange


class ReportType(str, Enum):
    """Reports that can be exported."""

    PATIENT_FLOW = "patient_flow"
    REVENUE = "revenue"


class ReportFormat(str, Enum):
    """Export file formats."""

    CSV = "csv"


class ReportExportRequest(BaseModel):
    """Schema for exporting a report over a date range."""

    report_type: ReportType
    start: date
    end: date
    format: str = Field(default=ReportFormat.CSV.value, min_length=1)
