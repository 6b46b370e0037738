"""Bookable time slots for a clinic day."""

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.config import settings

SLOT_FORMAT = "%H:%M"


def clinic_now() -> datetime:
    """Current wall-clock time at the clinic, naive, truncated to the second."""
    now = datetime.now(ZoneInfo(settings.clinic_timezone))
    return now.replace(tzinfo=None, microsecond=0)


def parse_slot(label: str) -> time:
    """
    Parse a slot label such as "09:30" into a time.

    Raises:
        ValueError: If the label is not in HH:MM form
    """
    return datetime.strptime(label, SLOT_FORMAT).time()


def generate_time_slots(
    start: str | None = None,
    end: str | None = None,
    interval_minutes: int | None = None,
) -> list[str]:
    """
    Generate the ordered slot labels for a clinic day.

    The window is half-open: ``start`` is the first slot, ``end`` is the
    closing time and never a slot itself.

    Args:
        start: Opening time (defaults to CLINIC_OPEN_TIME)
        end: Closing time (defaults to CLINIC_CLOSE_TIME)
        interval_minutes: Slot width (defaults to SLOT_INTERVAL_MINUTES)

    Returns:
        Slot labels in chronological order

    Raises:
        ValueError: If the window or interval is invalid
    """
    start = start or settings.clinic_open_time
    end = end or settings.clinic_close_time
    if interval_minutes is None:
        interval_minutes = settings.slot_interval_minutes

    if interval_minutes <= 0:
        raise ValueError("Slot interval must be positive")

    day = datetime(2000, 1, 1)
    current = datetime.combine(day, parse_slot(start))
    closing = datetime.combine(day, parse_slot(end))
    if closing <= current:
        raise ValueError("Clinic closing time must be after opening time")

    step = timedelta(minutes=interval_minutes)
    slots: list[str] = []
    while current < closing:
        slots.append(current.strftime(SLOT_FORMAT))
        current += step

    return slots
