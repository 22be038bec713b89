"""Message bus subscribers that turn booking and waitlist events into notifications."""

from __future__ import annotations

import structlog

from apps.bookings.domain import events
from apps.waitlist.events import WaitlistSpotAvailable

from .tasks import deliver_booking_event

logger = structlog.get_logger(__name__)

NOTIFIED_EVENTS = (
    events.BookingCreated,
    events.BookingConfirmed,
    events.BookingCancelled,
    events.BookingCheckedIn,
    events.BookingCheckedOut,
    events.BookingCompleted,
)


def forward_booking_event(event: events.BookingEvent) -> None:
    """Queue delivery of a committed booking event."""
    deliver_booking_event.delay(event.to_dict())
    logger.debug("notification.queued", event_type=event.name, booking_id=str(event.booking_id))


def forward_waitlist_event(event: WaitlistSpotAvailable) -> None:
    deliver_booking_event.delay(event.to_dict())
    logger.debug("notification.queued", event_type=event.name, entry_id=event.entry_id)


def register(bus) -> None:
    for event_type in NOTIFIED_EVENTS:
        bus.register_event_handler(event_type, forward_booking_event)
    bus.register_event_handler(WaitlistSpotAvailable, forward_waitlist_event)
