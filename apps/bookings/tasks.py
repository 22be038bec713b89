"""Celery tasks for the booking domain."""

from __future__ import annotations

import structlog
from celery import shared_task  # type: ignore

from . import services

logger = structlog.get_logger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled through Celery Beat)
# ============================================================================

@shared_task(name="bookings.release_expired_holds")
def release_expired_holds() -> dict[str, int]:
    """
    Cancel provisional bookings left unpaid past PROVISIONAL_HOLD_MINUTES.

    Disabled (no-op) while the setting is unset. Runs every minute.

    Returns:
        dict: {"cancelled": number of bookings cancelled}
    """
    cancelled = services.release_expired_holds()
    if cancelled:
        logger.info("bookings.holds_released", cancelled=cancelled)
    return {"cancelled": cancelled}


@shared_task(name="bookings.complete_checked_out_bookings")
def complete_checked_out_bookings() -> dict[str, int]:
    """
    Close stays after check-out (CHECKED_OUT -> COMPLETED). Runs hourly.

    Returns:
        dict: {"completed": number of bookings completed}
    """
    completed = services.complete_checked_out()
    if completed:
        logger.info("bookings.stays_completed", completed=completed)
    return {"completed": completed}
