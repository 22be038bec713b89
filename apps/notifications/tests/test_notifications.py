"""Tests for booking event notifications."""

from __future__ import annotations

from datetime import datetime
from unittest import mock

import pytest
import requests

from apps.bookings.domain import events
from apps.notifications import handlers, services
from apps.waitlist.events import WaitlistSpotAvailable
from conftest import TODAY
from shared.application.message_bus import MessageBus, message_bus

EVENT = {
    "event_id": "0b6f2f8e-4a63-4d55-9f0e-4c9d2a5b6f10",
    "event_type": "BOOKING_CONFIRMED",
    "payload": {"booking_id": "42", "paid_amount": 30000},
}


@pytest.fixture
def webhook(settings):
    settings.BOOKING_ENGINE = {
        **settings.BOOKING_ENGINE,
        "NOTIFICATION_WEBHOOK_URL": "https://hooks.example.com/bookings",
        "NOTIFICATION_TIMEOUT_SECONDS": 3,
    }


def test_delivery_is_disabled_without_url():
    with mock.patch("apps.notifications.services.requests.post") as post:
        assert services.send_webhook_notification(EVENT) is False
    post.assert_not_called()


def test_event_is_posted_as_json(webhook):
    with mock.patch("apps.notifications.services.requests.post") as post:
        assert services.send_webhook_notification(EVENT) is True

    post.assert_called_once_with(
        "https://hooks.example.com/bookings",
        json=EVENT,
        headers={"X-Booking-Event": "BOOKING_CONFIRMED"},
        timeout=3,
    )


def test_network_failure_is_logged_not_raised(webhook):
    with mock.patch("apps.notifications.services.requests.post", side_effect=requests.ConnectionError("refused")):
        assert services.send_webhook_notification(EVENT) is False


def test_rejected_delivery(webhook):
    response = mock.Mock(status_code=500)
    response.raise_for_status.side_effect = requests.HTTPError(response=response)
    with mock.patch("apps.notifications.services.requests.post", return_value=response):
        assert services.send_webhook_notification(EVENT) is False


def test_handlers_are_registered_for_every_booking_event():
    for event_type in handlers.NOTIFIED_EVENTS:
        assert handlers.forward_booking_event in message_bus._event_handlers[event_type]


def test_published_event_reaches_the_webhook(webhook):
    bus = MessageBus()
    handlers.register(bus)
    handlers.register(bus)
    event = events.BookingCancelled(
        booking_id="b-1",
        room_type_id=1,
        guest_id="guest-42",
        start_date=TODAY,
        end_date=TODAY.replace(day=3),
        rooms_booked=1,
        reason="Plans changed",
    )

    with mock.patch("apps.notifications.services.requests.post") as post:
        bus.publish_events([event])

    post.assert_called_once()
    body = post.call_args.kwargs["json"]
    assert body["event_type"] == "BOOKING_CANCELLED"
    assert body["payload"]["reason"] == "Plans changed"


def test_waitlist_event_reaches_the_webhook(webhook):
    bus = MessageBus()
    handlers.register(bus)
    event = WaitlistSpotAvailable(
        entry_id=7,
        guest_id="guest-7",
        room_type_id=1,
        start_date=TODAY,
        end_date=TODAY.replace(day=3),
        rooms_requested=1,
        expires_at=datetime(2025, 10, 2, 12, 0),
    )

    with mock.patch("apps.notifications.services.requests.post") as post:
        bus.publish_events([event])

    post.assert_called_once()
    body = post.call_args.kwargs["json"]
    assert body["event_type"] == "WAITLIST_SPOT_AVAILABLE"
    assert body["payload"]["entry_id"] == 7
    assert body["payload"]["expires_at"] == "2025-10-02T12:00:00"
