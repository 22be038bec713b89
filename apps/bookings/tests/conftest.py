from __future__ import annotations

from datetime import timedelta

import pytest

from apps.bookings.application.command_handlers import BookingLifecycleManager, CreateBookingCommand
from conftest import TODAY


@pytest.fixture
def manager(ledger) -> BookingLifecycleManager:
    return BookingLifecycleManager(ledger=ledger)


@pytest.fixture
def make_booking(manager, deluxe, guest_rules):
    """Provisional booking ``days_ahead`` days after TODAY; 1 room x 2 nights = 30000."""

    def create(days_ahead: int = 10, nights: int = 2, rooms: int = 1, classification: str = "standard", **extra):
        start = TODAY + timedelta(days=days_ahead)
        return manager.create(
            CreateBookingCommand(
                room_type_id=extra.pop("room_type_id", deluxe.pk),
                guest_id=extra.pop("guest_id", "guest-42"),
                guest_classification=classification,
                start_date=start,
                end_date=start + timedelta(days=nights),
                rooms_booked=rooms,
                request_date=TODAY,
                **extra,
            )
        )

    return create
