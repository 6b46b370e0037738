"""Appointment service for scheduling business logic."""

from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

import structlog

from app.core.appointment_states import allowed_sources, is_active
from app.core.exceptions import NotFoundException, ValidationException
from app.core.time_slots import clinic_now, generate_time_slots, parse_slot
from app.repositories.appointment_repository import AppointmentRepository
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatus,
)
from app.services.notification_service import NotificationSink, notify

logger = structlog.get_logger(__name__)


class AppointmentService:
    """Service for booking appointments and driving their lifecycle."""

    def __init__(
        self,
        repository: AppointmentRepository,
        notifier: NotificationSink,
        clock: Callable[[], datetime] = clinic_now,
        time_slots: list[str] | None = None,
    ):
        """
        Initialize service with its collaborators.

        Args:
            repository: Appointment store
            notifier: Sink for patient notifications
            clock: Returns the clinic's current wall-clock time
            time_slots: Bookable slots; defaults to the configured clinic day
        """
        self.repository = repository
        self.notifier = notifier
        self.clock = clock
        self.time_slots = time_slots if time_slots is not None else generate_time_slots()

    async def book_appointment(self, data: AppointmentCreate) -> AppointmentResponse:
        """
        Book a new appointment.

        Args:
            data: Appointment booking data

        Returns:
            Created appointment

        Raises:
            ValidationException: If the booking data is invalid
            ConflictException: If the slot is already held by an active appointment
        """
        self._validate_booking(data)

        row = await self.repository.create(
            {
                "patient_id": data.patient_id,
                "doctor_id": data.doctor_id,
                "department_id": data.department_id,
                "appointment_date": data.appointment_date,
                "time_slot": data.time_slot,
                "reason": data.reason.strip(),
                "notes": data.notes or "",
            }
        )
        logger.info(
            "appointment_booked",
            appointment_id=str(row["id"]),
            doctor_id=row["doctor_id"],
            appointment_date=str(row["appointment_date"]),
            time_slot=row["time_slot"],
        )

        await notify(self.notifier.send_appointment_confirmation, row)

        return AppointmentResponse.model_validate(row)

    async def get_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        row = await self.repository.get(appointment_id)
        if not row:
            raise NotFoundException("Appointment not found")
        return AppointmentResponse.model_validate(row)

    async def list_appointments(self, filters: AppointmentFilters) -> AppointmentListResponse:
        """List appointments with filtering and pagination."""
        total, rows = await self.repository.list_filtered(filters)
        return AppointmentListResponse(
            total=total,
            page=filters.page,
            page_size=filters.page_size,
            items=[AppointmentResponse.model_validate(row) for row in rows],
        )

    async def get_patient_appointments(self, patient_id: str) -> list[AppointmentResponse]:
        """List a patient's appointments, newest first."""
        rows = await self.repository.list_by_patient(patient_id)
        return [AppointmentResponse.model_validate(row) for row in rows]

    async def get_doctor_appointments(
        self,
        doctor_id: str,
        appointment_date: date | None = None,
    ) -> list[AppointmentResponse]:
        """List a doctor's appointments, optionally for a single day."""
        rows = await self.repository.list_by_doctor(doctor_id, appointment_date)
        return [AppointmentResponse.model_validate(row) for row in rows]

    async def confirm_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """Confirm a scheduled appointment."""
        row = await self._transition(
            appointment_id,
            AppointmentStatus.CONFIRMED,
            "Only scheduled appointments can be confirmed",
        )
        return AppointmentResponse.model_validate(row)

    async def check_in(self, appointment_id: UUID) -> AppointmentResponse:
        """
        Check a patient in for a scheduled or confirmed appointment.

        Raises:
            NotFoundException: If appointment not found
            ValidationException: If the appointment cannot be checked in
        """
        row = await self._transition(
            appointment_id,
            AppointmentStatus.CHECKED_IN,
            "Appointment cannot be checked in",
        )
        await notify(self.notifier.send_check_in_notification, row)
        return AppointmentResponse.model_validate(row)

    async def complete_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """Complete a checked-in appointment."""
        row = await self._transition(
            appointment_id,
            AppointmentStatus.COMPLETED,
            "Only checked-in appointments can be completed",
        )
        return AppointmentResponse.model_validate(row)

    async def cancel_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """
        Cancel an appointment that has not yet completed.

        Cancelling releases the slot for other bookings.
        """
        row = await self._transition(
            appointment_id,
            AppointmentStatus.CANCELLED,
            "Appointment cannot be cancelled",
            cancelled_at=datetime.now(UTC),
        )
        await notify(self.notifier.send_cancellation_notification, row)
        return AppointmentResponse.model_validate(row)

    async def reschedule_appointment(
        self,
        appointment_id: UUID,
        new_date: date,
        new_time_slot: str,
    ) -> AppointmentResponse:
        """
        Move an appointment to another date and slot with the same doctor.

        The appointment returns to the scheduled state.

        Raises:
            NotFoundException: If appointment not found
            ValidationException: If the appointment is terminal or the new slot is invalid
            ConflictException: If the new slot is already held; the appointment is unchanged
        """
        current = await self.get_appointment(appointment_id)
        if not is_active(current.status):
            raise ValidationException("Appointment cannot be rescheduled")

        self._validate_slot(new_date, new_time_slot)

        row = await self._transition(
            appointment_id,
            AppointmentStatus.SCHEDULED,
            "Appointment cannot be rescheduled",
            appointment_date=new_date,
            time_slot=new_time_slot,
        )
        logger.info(
            "appointment_rescheduled",
            appointment_id=str(appointment_id),
            appointment_date=str(new_date),
            time_slot=new_time_slot,
        )
        await notify(self.notifier.send_reschedule_notification, row)
        return AppointmentResponse.model_validate(row)

    async def get_available_slots(self, doctor_id: str, appointment_date: date) -> list[str]:
        """
        List the slots a doctor still has free on a given day.

        Returns:
            Slot labels in chronological order
        """
        booked = await self.repository.list_by_doctor(doctor_id, appointment_date)
        taken = {row["time_slot"] for row in booked if is_active(AppointmentStatus(row["status"]))}
        return [slot for slot in self.time_slots if slot not in taken]

    async def _transition(
        self,
        appointment_id: UUID,
        target: AppointmentStatus,
        error_message: str,
        **values: Any,
    ) -> dict[str, Any]:
        row = await self.repository.transition(
            appointment_id,
            target,
            allowed_sources(target),
            **values,
        )
        if row is None:
            # Distinguish a missing appointment from an illegal transition
            await self.get_appointment(appointment_id)
            raise ValidationException(error_message)

        logger.info(
            "appointment_status_changed",
            appointment_id=str(appointment_id),
            status=target.value,
        )
        return row

    def _validate_booking(self, data: AppointmentCreate) -> None:
        if not data.patient_id or not data.doctor_id or not data.department_id:
            raise ValidationException("Patient, doctor, and department are required")
        if data.appointment_date is None:
            raise ValidationException("Appointment date is required")
        if not data.time_slot:
            raise ValidationException("Time slot is required")
        if data.time_slot not in self.time_slots:
            raise ValidationException(f"Invalid time slot: {data.time_slot}")
        if not data.reason or not data.reason.strip():
            raise ValidationException("Reason for appointment is required")
        self._check_not_past(data.appointment_date, data.time_slot)

    def _validate_slot(self, appointment_date: date, time_slot: str) -> None:
        if time_slot not in self.time_slots:
            raise ValidationException(f"Invalid time slot: {time_slot}")
        self._check_not_past(appointment_date, time_slot)

    def _check_not_past(self, appointment_date: date, time_slot: str) -> None:
        starts_at = datetime.combine(appointment_date, parse_slot(time_slot))
        if starts_at < self.clock().replace(microsecond=0):
            raise ValidationException("Cannot book appointments in the past")
