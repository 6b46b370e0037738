"""Appointment store backed by the appointments table."""

from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, exists, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.appointment_states import ACTIVE_STATUSES
from app.core.exceptions import ConflictException
from app.models.appointments import appointments
from app.schemas.appointments import AppointmentFilters, AppointmentStatus

logger = structlog.get_logger(__name__)

SLOT_TAKEN_MESSAGE = "Selected time slot is not available"

_ACTIVE_VALUES = [status.value for status in ACTIVE_STATUSES]


class AppointmentRepository:
    """
    Persistence for appointment records.

    Slot exclusivity is enforced by the ``uq_appointments_active_slot``
    partial unique index, so inserts and slot changes either land or fail
    with ConflictException in a single statement.
    """

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def get(self, appointment_id: UUID) -> dict[str, Any] | None:
        """Fetch one appointment by ID."""
        stmt = select(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        return dict(row._mapping) if row else None

    async def list_filtered(self, filters: AppointmentFilters) -> tuple[int, list[dict[str, Any]]]:
        """
        List appointments with filtering and pagination.

        Returns:
            Tuple of (total matching rows, rows for the requested page)
        """
        conditions = []

        if filters.patient_id:
            conditions.append(appointments.c.patient_id == filters.patient_id)

        if filters.doctor_id:
            conditions.append(appointments.c.doctor_id == filters.doctor_id)

        if filters.department_id:
            conditions.append(appointments.c.department_id == filters.department_id)

        if filters.status:
            conditions.append(appointments.c.status == filters.status.value)

        if filters.from_date:
            conditions.append(appointments.c.appointment_date >= filters.from_date)

        if filters.to_date:
            conditions.append(appointments.c.appointment_date <= filters.to_date)

        count_stmt = select(func.count()).select_from(appointments).where(*conditions)
        total_result = await self.db.execute(count_stmt)
        total = total_result.scalar() or 0

        offset = (filters.page - 1) * filters.page_size

        stmt = (
            select(appointments)
            .where(*conditions)
            .order_by(appointments.c.appointment_date.desc(), appointments.c.time_slot.desc())
            .limit(filters.page_size)
            .offset(offset)
        )

        result = await self.db.execute(stmt)
        return total, [dict(row._mapping) for row in result.fetchall()]

    async def list_by_patient(self, patient_id: str) -> list[dict[str, Any]]:
        """List a patient's appointments, newest first."""
        stmt = (
            select(appointments)
            .where(appointments.c.patient_id == patient_id)
            .order_by(appointments.c.appointment_date.desc(), appointments.c.time_slot.desc())
        )
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]

    async def list_by_doctor(
        self,
        doctor_id: str,
        appointment_date: date | None = None,
    ) -> list[dict[str, Any]]:
        """List a doctor's appointments, optionally for a single day, oldest first."""
        conditions = [appointments.c.doctor_id == doctor_id]
        if appointment_date is not None:
            conditions.append(appointments.c.appointment_date == appointment_date)

        stmt = (
            select(appointments)
            .where(and_(*conditions))
            .order_by(appointments.c.appointment_date.asc(), appointments.c.time_slot.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]

    async def list_by_date_range(self, start: date, end: date) -> list[dict[str, Any]]:
        """List appointments whose date falls within [start, end]."""
        stmt = (
            select(appointments)
            .where(
                and_(
                    appointments.c.appointment_date >= start,
                    appointments.c.appointment_date <= end,
                )
            )
            .order_by(appointments.c.appointment_date.asc(), appointments.c.time_slot.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]

    async def active_slot_exists(
        self,
        doctor_id: str,
        appointment_date: date,
        time_slot: str,
    ) -> bool:
        """Check whether an active appointment holds the doctor/date/slot."""
        stmt = select(
            exists().where(
                and_(
                    appointments.c.doctor_id == doctor_id,
                    appointments.c.appointment_date == appointment_date,
                    appointments.c.time_slot == time_slot,
                    appointments.c.status.in_(_ACTIVE_VALUES),
                )
            )
        )
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def create(self, values: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new appointment in the scheduled state.

        Raises:
            ConflictException: If an active appointment already holds the slot
        """
        now = datetime.now(UTC)
        stmt = (
            insert(appointments)
            .values(
                **values,
                status=AppointmentStatus.SCHEDULED.value,
                created_at=now,
                updated_at=now,
            )
            .returning(appointments)
        )

        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info(
                "slot_conflict",
                doctor_id=values.get("doctor_id"),
                appointment_date=str(values.get("appointment_date")),
                time_slot=values.get("time_slot"),
                error=str(e.orig),
            )
            raise ConflictException(SLOT_TAKEN_MESSAGE) from e

        return dict(row._mapping)

    async def transition(
        self,
        appointment_id: UUID,
        target: AppointmentStatus,
        allowed_from: Iterable[AppointmentStatus],
        **values: Any,
    ) -> dict[str, Any] | None:
        """
        Move an appointment to ``target`` if it is currently in ``allowed_from``.

        The status check and the write are one UPDATE statement, so a
        concurrent writer cannot slip a terminal state underneath it.

        Returns:
            Updated row, or None if the appointment is missing or in a
            status outside ``allowed_from``

        Raises:
            ConflictException: If ``values`` move it onto a held slot
        """
        stmt = (
            update(appointments)
            .where(
                and_(
                    appointments.c.id == appointment_id,
                    appointments.c.status.in_([status.value for status in allowed_from]),
                )
            )
            .values(status=target.value, updated_at=datetime.now(UTC), **values)
            .returning(appointments)
        )

        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info(
                "slot_conflict",
                appointment_id=str(appointment_id),
                appointment_date=str(values.get("appointment_date")),
                time_slot=values.get("time_slot"),
                error=str(e.orig),
            )
            raise ConflictException(SLOT_TAKEN_MESSAGE) from e

        return dict(row._mapping) if row else None
