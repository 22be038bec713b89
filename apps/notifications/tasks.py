"""Celery tasks for notification delivery."""

from __future__ import annotations

from celery import shared_task  # type: ignore

from .services import send_webhook_notification


@shared_task(name="notifications.deliver_booking_event")
def deliver_booking_event(event: dict) -> bool:
    """Deliver one serialized booking event; returns whether it was accepted."""
    return send_webhook_notification(event)
