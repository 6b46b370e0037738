"""Appointment lifecycle state machine."""

from app.schemas.appointments import AppointmentStatus

# Statuses that still hold their doctor/date/slot
ACTIVE_STATUSES: frozenset[AppointmentStatus] = frozenset(
    {
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CHECKED_IN,
    }
)

TERMINAL_STATUSES: frozenset[AppointmentStatus] = frozenset(
    {
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }
)

# target status -> statuses it may be entered from
# Rescheduling re-enters SCHEDULED from any active status.
ALLOWED_SOURCES: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: ACTIVE_STATUSES,
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.SCHEDULED}),
    AppointmentStatus.CHECKED_IN: frozenset(
        {AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED}
    ),
    AppointmentStatus.COMPLETED: frozenset({AppointmentStatus.CHECKED_IN}),
    AppointmentStatus.CANCELLED: ACTIVE_STATUSES,
}


def allowed_sources(target: AppointmentStatus) -> frozenset[AppointmentStatus]:
    """Return the statuses from which ``target`` may be reached."""
    return ALLOWED_SOURCES[target]


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    """Check whether moving from ``current`` to ``target`` is a legal edge."""
    return current in ALLOWED_SOURCES[target]


def is_active(status: AppointmentStatus) -> bool:
    """Check whether an appointment in ``status`` occupies its slot."""
    return status in ACTIVE_STATUSES
