"""Appointment endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import AppointmentServiceDep
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentListResponse,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatus,
    AvailableSlotsResponse,
)

router = APIRouter()


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book new appointment",
)
async def book_appointment(
    data: AppointmentCreate,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Book a new appointment.

    Args:
        data: Appointment booking data
        service: Scheduling service

    Returns:
        Created appointment
    """
    return await service.book_appointment(data)


@router.get(
    "/",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    service: AppointmentServiceDep,
    patient_id: str | None = Query(None),
    doctor_id: str | None = Query(None),
    department_id: str | None = Query(None),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> AppointmentListResponse:
    """
    List appointments with filtering.

    Returns:
        Paginated list of appointments
    """
    filters = AppointmentFilters(
        patient_id=patient_id,
        doctor_id=doctor_id,
        department_id=department_id,
        status=status_filter,
        from_date=from_date,
        to_date=to_date,
        page=page,
        page_size=page_size,
    )
    return await service.list_appointments(filters)


@router.get(
    "/available-slots",
    response_model=AvailableSlotsResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List a doctor's free slots",
)
async def get_available_slots(
    service: AppointmentServiceDep,
    doctor_id: str = Query(..., min_length=1),
    appointment_date: date = Query(..., alias="date"),
) -> AvailableSlotsResponse:
    """
    List the slots a doctor still has free on a given day.

    Returns:
        Free slot labels in chronological order
    """
    slots = await service.get_available_slots(doctor_id, appointment_date)
    return AvailableSlotsResponse(
        doctor_id=doctor_id,
        appointment_date=appointment_date,
        slots=slots,
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Get a specific appointment."""
    return await service.get_appointment(appointment_id)


@router.post(
    "/{appointment_id}/confirm",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Confirm appointment",
)
async def confirm_appointment(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Confirm a scheduled appointment."""
    return await service.confirm_appointment(appointment_id)


@router.post(
    "/{appointment_id}/check-in",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Check patient in",
)
async def check_in(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Check a patient in for their appointment."""
    return await service.check_in(appointment_id)


@router.post(
    "/{appointment_id}/complete",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Complete appointment",
)
async def complete_appointment(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Mark a checked-in appointment as completed."""
    return await service.complete_appointment(appointment_id)


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Cancel an appointment and release its slot."""
    return await service.cancel_appointment(appointment_id)


@router.post(
    "/{appointment_id}/reschedule",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Reschedule appointment",
)
async def reschedule_appointment(
    appointment_id: UUID,
    data: AppointmentReschedule,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Move an appointment to another date and slot.

    Args:
        appointment_id: Appointment ID
        data: New date and slot
        service: Scheduling service

    Returns:
        Rescheduled appointment
    """
    return await service.reschedule_appointment(
        appointment_id,
        data.appointment_date,
        data.time_slot,
    )
