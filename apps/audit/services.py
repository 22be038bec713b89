"""Audit log writer.

The booking engine treats the log as a write-only sink. Reading it is left
to the Django admin and to reporting tools outside this project.
"""

from __future__ import annotations

from typing import Any, Iterable

import structlog
from django.forms.models import model_to_dict  # type: ignore

from .models import AuditEntry

logger = structlog.get_logger(__name__)

BOOKING_SNAPSHOT_FIELDS = (
    "status",
    "room_type",
    "start_date",
    "end_date",
    "rooms_booked",
    "total_price",
    "deposit_required",
    "cancellation_reason",
)


def snapshot(instance, fields: Iterable[str] = BOOKING_SNAPSHOT_FIELDS) -> dict[str, Any]:
    """JSON-ready copy of ``fields`` for before/after columns."""

    data = model_to_dict(instance, fields=list(fields))
    for key, value in data.items():
        if hasattr(value, "isoformat"):
            data[key] = value.isoformat()
    return data


def record(
    actor: str,
    action: str,
    booking=None,
    before: dict | None = None,
    after: dict | None = None,
    reason: str = "",
    metadata: dict | None = None,
) -> AuditEntry:
    """Append one entry. Call inside the transaction of the change it records."""

    entry = AuditEntry.objects.create(
        actor=actor or "system",
        action=action,
        booking=booking,
        before=before,
        after=after,
        reason=reason or "",
        metadata=metadata or {},
    )
    logger.info(
        "audit.recorded",
        action=str(action),
        actor=entry.actor,
        booking_id=str(booking.pk) if booking is not None else None,
    )
    return entry
