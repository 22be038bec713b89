"""Celery tasks for the inventory domain."""

from __future__ import annotations

from datetime import timedelta

import structlog
from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .ledger import InventoryLedger
from .models import RoomType

logger = structlog.get_logger(__name__)


@shared_task(name="inventory.extend_inventory_horizon")
def extend_inventory_horizon() -> int:
    """Seed missing inventory rows for every room type up to the horizon."""

    ledger = InventoryLedger()
    through = timezone.localdate() + timedelta(days=ledger.horizon_days)

    created = 0
    for room_type_id in RoomType.objects.values_list("pk", flat=True):
        created += ledger.seed(room_type_id, through)

    logger.info("inventory.horizon_extended", through=through.isoformat(), created=created)
    return created
