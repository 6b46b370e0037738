"""Tests for notification delivery."""

from datetime import date, datetime
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from app.repositories.appointment_repository import AppointmentRepository
from app.services import notification_service
from app.services.appointment_service import AppointmentService
from app.services.notification_service import LoggingNotificationSink, notify


class BrokenNotificationSink:
    """Sink whose every delivery fails."""

    def __getattr__(self, name: str):
        async def _fail(*args):
            raise RuntimeError(f"{name} unavailable")

        _fail.__name__ = name
        return _fail


@pytest.fixture
def mock_logger(monkeypatch) -> MagicMock:
    """Replace the notification module logger."""
    logger = MagicMock()
    monkeypatch.setattr(notification_service, "logger", logger)
    return logger


@pytest.mark.asyncio
async def test_logging_sink_emits_events(mock_logger: MagicMock) -> None:
    """Test that the default sink writes structured events."""
    sink = LoggingNotificationSink()
    appointment_id = uuid4()
    appointment = {
        "id": appointment_id,
        "patient_id": "p1",
        "appointment_date": date(2025, 12, 20),
        "time_slot": "10:00",
    }

    await sink.send_appointment_confirmation(appointment)
    await sink.send_insurance_claim_update("claim-1", "approved")

    first, second = mock_logger.info.call_args_list
    assert first.args == ("appointment_confirmation_sent",)
    assert first.kwargs["appointment_id"] == str(appointment_id)
    assert first.kwargs["appointment_date"] == "2025-12-20"
    assert second.args == ("insurance_claim_update_sent",)
    assert second.kwargs == {"claim_id": "claim-1", "status": "approved"}


@pytest.mark.asyncio
async def test_notify_swallows_sink_errors(mock_logger: MagicMock) -> None:
    """Test that delivery failures are logged, not raised."""
    sink = BrokenNotificationSink()

    await notify(sink.send_check_in_notification, {"id": uuid4()})

    mock_logger.warning.assert_called_once_with(
        "failed_to_send_notification",
        notification="send_check_in_notification",
        error="send_check_in_notification unavailable",
    )


@pytest.mark.asyncio
async def test_booking_succeeds_when_notification_fails(db_session, make_booking) -> None:
    """Test that a broken sink does not undo a booking."""
    service = AppointmentService(
        AppointmentRepository(db_session),
        BrokenNotificationSink(),
        clock=lambda: datetime(2025, 12, 1, 8, 0),
    )

    appointment = await service.book_appointment(make_booking())
    cancelled = await service.cancel_appointment(appointment.id)

    assert cancelled.status == "cancelled"
    assert await service.get_available_slots("d1", date(2025, 12, 20)) == service.time_slots
