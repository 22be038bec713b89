"""Domain services for booking workflows used outside the request cycle."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable

import structlog
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain import errors

from .application.command_handlers import (
    BookingLifecycleManager,
    CancelBookingCommand,
    CompleteBookingCommand,
)
from .domain.entities import BookingStatus
from .models import Booking

logger = structlog.get_logger(__name__)

SYSTEM_ACTOR = "system"


def expired_holds(now=None) -> Iterable:
    """Ids of provisional bookings older than PROVISIONAL_HOLD_MINUTES"""

    minutes = settings.BOOKING_ENGINE.get("PROVISIONAL_HOLD_MINUTES")
    if not minutes:
        return Booking.objects.none().values_list("pk", flat=True)

    cutoff = (now or timezone.now()) - timedelta(minutes=minutes)
    return Booking.objects.filter(
        status=BookingStatus.PROVISIONAL.value,
        created_at__lt=cutoff,
    ).values_list("pk", flat=True)


def release_expired_holds(manager: BookingLifecycleManager | None = None, now=None) -> int:
    """Cancel unpaid provisional bookings; returns how many were cancelled."""

    manager = manager or BookingLifecycleManager()
    cancelled = 0
    for booking_id in list(expired_holds(now)):
        try:
            manager.cancel(
                CancelBookingCommand(
                    booking_id=booking_id,
                    actor=SYSTEM_ACTOR,
                    reason="Provisional hold expired without payment.",
                )
            )
            cancelled += 1
        except errors.InvalidTransition:
            # Paid or cancelled between the query and the update
            logger.info("booking.hold_expiry_skipped", booking_id=str(booking_id))
    return cancelled


def complete_checked_out(manager: BookingLifecycleManager | None = None) -> int:
    """Move every CHECKED_OUT booking to COMPLETED."""

    manager = manager or BookingLifecycleManager()
    completed = 0
    checked_out = Booking.objects.filter(status=BookingStatus.CHECKED_OUT.value).values_list("pk", flat=True)
    for booking_id in list(checked_out):
        try:
            manager.complete(CompleteBookingCommand(booking_id=booking_id, actor=SYSTEM_ACTOR))
            completed += 1
        except errors.InvalidTransition:
            logger.info("booking.completion_skipped", booking_id=str(booking_id))
    return completed
