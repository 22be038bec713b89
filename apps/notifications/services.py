"""Notification services for delivering booking events to a webhook."""

from __future__ import annotations

import requests
import structlog
from django.conf import settings  # type: ignore

logger = structlog.get_logger(__name__)


# ============================================================================
# WEBHOOK NOTIFICATIONS
# ============================================================================

def send_webhook_notification(event: dict) -> bool:
    """
    POST one serialized booking event to NOTIFICATION_WEBHOOK_URL.

    Args:
        event: Output of ``DomainEvent.to_dict()``

    Returns:
        bool: True if the receiver accepted the event. False when delivery
        is disabled (no URL configured) or failed; failures are logged and
        never raised.
    """
    config = settings.BOOKING_ENGINE
    url = config.get("NOTIFICATION_WEBHOOK_URL")
    if not url:
        logger.debug("notification.disabled", event_type=event.get("event_type"))
        return False

    try:
        response = requests.post(
            url,
            json=event,
            headers={"X-Booking-Event": event.get("event_type", "")},
            timeout=config.get("NOTIFICATION_TIMEOUT_SECONDS", 5),
        )
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        logger.error(
            "notification.rejected",
            event_id=event.get("event_id"),
            event_type=event.get("event_type"),
            status_code=e.response.status_code if e.response is not None else None,
        )
        return False
    except requests.exceptions.RequestException as e:
        logger.error(
            "notification.delivery_failed",
            event_id=event.get("event_id"),
            event_type=event.get("event_type"),
            error=str(e),
        )
        return False

    logger.info("notification.delivered", event_id=event.get("event_id"), event_type=event.get("event_type"))
    return True
