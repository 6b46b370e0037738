"""Appointment schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment.

    Booking rules are applied by the scheduling service, which reports the
    first rule that fails.
    """

    patient_id: str = ""
    doctor_id: str = ""
    department_id: str = ""
    appointment_date: date | None = None
    time_slot: str = ""
    reason: str = ""
    notes: str | None = Field(None, max_length=1000)


class AppointmentReschedule(BaseModel):
    """Schema for moving an appointment to another date and slot."""

    appointment_date: date
    time_slot: str = Field(..., min_length=1)


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: UUID
    patient_id: str
    doctor_id: str
    department_id: str
    appointment_date: date
    time_slot: str
    reason: str
    notes: str
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None

    model_config = {"from_attributes": True}


class AppointmentListResponse(BaseModel):
    """Schema for paginated appointment list response."""

    total: int
    page: int
    page_size: int
    items: list[AppointmentResponse]


class AppointmentFilters(BaseModel):
    """Schema for appointment filtering."""

    patient_id: str | None = None
    doctor_id: str | None = None
    department_id: str | None = None
    status: AppointmentStatus | None = None
    from_date: date | None = None
    to_date: date | None = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class AvailableSlotsResponse(BaseModel):
    """Schema for a doctor's free slots on a given day."""

    doctor_id: str
    appointment_date: date
    slots: list[str]
