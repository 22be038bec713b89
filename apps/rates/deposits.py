"""Deposit policy table for group bookings."""

from __future__ import annotations

from decimal import Decimal
from typing import List

import structlog
from django.conf import settings  # type: ignore

from shared.domain import errors
from shared.domain.value_objects import round_half_up

from .models import DepositPolicy

logger = structlog.get_logger(__name__)


class DepositPolicyTable:
    """
    Maps a room count to the deposit a group booking must pay up front.

    Bookings below the group threshold pay no deposit. At or above it
    exactly one active band must contain the room count; anything else is
    an operator error and fails loudly instead of defaulting.
    """

    def __init__(self, group_threshold: int | None = None):
        if group_threshold is None:
            group_threshold = settings.BOOKING_ENGINE['GROUP_THRESHOLD']
        self.group_threshold = group_threshold

    def deposit_for(self, rooms_booked: int, total_price: int) -> int:
        if rooms_booked < self.group_threshold:
            return 0

        bands = list(
            DepositPolicy.objects.filter(
                active=True,
                min_rooms__lte=rooms_booked,
                max_rooms__gte=rooms_booked,
            )[:2]
        )
        if not bands:
            logger.error("deposit.no_band", rooms_booked=rooms_booked)
            raise errors.ConfigurationError(f"No deposit policy covers {rooms_booked} rooms.")
        if len(bands) > 1:
            logger.error("deposit.overlapping_bands", rooms_booked=rooms_booked, band_ids=[b.pk for b in bands])
            raise errors.ConfigurationError(f"More than one deposit policy covers {rooms_booked} rooms.")

        band = bands[0]
        if band.deposit_type == DepositPolicy.DepositType.PERCENT:
            return round_half_up(Decimal(total_price) * band.value / Decimal(100))
        if band.deposit_type == DepositPolicy.DepositType.FIXED:
            return min(round_half_up(band.value), total_price)
        raise TypeError(f"Unknown deposit type: {band.deposit_type!r}")

    def partition_problems(self) -> List[str]:
        """
        Gaps and overlaps in the active bands over ``[threshold, inf)``.

        An empty list means every group size maps to exactly one band.
        """
        problems: List[str] = []
        bands = list(DepositPolicy.objects.filter(active=True).order_by('min_rooms', 'max_rooms'))
        if not bands:
            return [f"No active deposit bands; group bookings of {self.group_threshold}+ rooms cannot be priced."]

        expected = self.group_threshold
        for band in bands:
            if band.max_rooms < self.group_threshold:
                problems.append(f"Band [{band.min_rooms}, {band.max_rooms}] lies entirely below the group threshold.")
                continue
            if band.min_rooms > expected:
                problems.append(f"Gap: no band covers {expected}-{band.min_rooms - 1} rooms.")
            elif band.min_rooms < expected and expected > self.group_threshold:
                problems.append(f"Overlap: band [{band.min_rooms}, {band.max_rooms}] overlaps {band.min_rooms}-{min(band.max_rooms, expected - 1)} rooms.")
            expected = max(expected, band.max_rooms + 1)

        return problems
