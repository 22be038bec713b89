"""Celery tasks for the waitlist."""

from __future__ import annotations

from celery import shared_task  # type: ignore

from . import services


@shared_task(name="waitlist.expire_notified_entries")
def expire_notified_entries() -> dict[str, int]:
    """
    Expire notifications the guest did not act on. Runs every 15 minutes.

    Returns:
        dict: {"expired": number of entries expired}
    """
    return {"expired": services.expire_notified()}
