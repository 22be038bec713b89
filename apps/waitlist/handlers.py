"""Message bus subscribers that keep the waitlist in step with bookings."""

from __future__ import annotations

from apps.bookings.domain import events

from . import services


def on_booking_cancelled(event: events.BookingCancelled) -> None:
    services.offer_freed_rooms(event)


def on_booking_created(event: events.BookingCreated) -> None:
    services.mark_converted(event)


def register(bus) -> None:
    bus.register_event_handler(events.BookingCancelled, on_booking_cancelled)
    bus.register_event_handler(events.BookingCreated, on_booking_created)
