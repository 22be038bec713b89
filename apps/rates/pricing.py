"""
Pricing Engine

Composes a room type's base rate with the calendar rate store, night by
night, and asks the deposit policy table what a group must pay up front.

Rounding happens per night (integer minor units, half-up) before anything
is summed, so the total does not depend on the order nights are added in.
No clock, no randomness: identical inputs and configuration give an
identical breakdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

import structlog

from apps.inventory.models import RoomType
from shared.domain import errors
from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange

from .calendar import CalendarRateStore
from .deposits import DepositPolicyTable
from .domain.modifiers import RateModifier, apply_modifier

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NightPrice(ValueObject):
    date: date
    base_rate: int
    rate: int
    modifier: RateModifier

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'base_rate': self.base_rate,
            'rate': self.rate,
            'modifier': self.modifier.describe(),
        }


@dataclass(frozen=True)
class PriceBreakdown(ValueObject):
    """Priced stay; amounts are integer minor currency units."""
    room_type_id: int
    rooms_booked: int
    nights: Tuple[NightPrice, ...]
    per_night_amounts: Tuple[int, ...]
    subtotal: int
    deposit_required: int

    @property
    def total(self) -> int:
        # Taxes and fees are added outside the engine
        return self.subtotal

    def to_dict(self) -> dict:
        return {
            'room_type_id': self.room_type_id,
            'rooms_booked': self.rooms_booked,
            'nights': [night.to_dict() for night in self.nights],
            'per_night_amounts': list(self.per_night_amounts),
            'subtotal': self.subtotal,
            'deposit_required': self.deposit_required,
            'total': self.total,
        }


class PricingEngine:
    def __init__(self, calendar: CalendarRateStore | None = None, deposits: DepositPolicyTable | None = None):
        self.calendar = calendar or CalendarRateStore()
        self.deposits = deposits or DepositPolicyTable()

    def price(self, room_type_id, dates: DateRange, rooms_booked: int) -> PriceBreakdown:
        """
        Price ``rooms_booked`` rooms for every night of ``dates``.

        Raises:
            ValidationError: rooms_booked is not a positive integer
            NotFound: unknown room type
            PricingRejected: first blocked night of the stay
            ConfigurationError: no unique deposit band for a group booking
        """
        if isinstance(rooms_booked, bool) or not isinstance(rooms_booked, int) or rooms_booked < 1:
            raise errors.ValidationError("Room count must be a positive integer.")

        try:
            room_type = RoomType.objects.get(pk=room_type_id)
        except RoomType.DoesNotExist:
            raise errors.NotFound(f"Room type {room_type_id} does not exist.")

        modifiers = self.calendar.modifiers_for_range(room_type.pk, dates)

        nights = []
        for night in dates.nights():
            rate = apply_modifier(room_type.base_rate, modifiers[night])
            if rate is None:
                logger.info("pricing.blocked", room_type_id=room_type.pk, date=night.isoformat())
                raise errors.PricingRejected(night)
            nights.append(NightPrice(night, room_type.base_rate, rate, modifiers[night]))

        per_night_amounts = tuple(night.rate * rooms_booked for night in nights)
        subtotal = sum(per_night_amounts)
        deposit_required = self.deposits.deposit_for(rooms_booked, subtotal)

        logger.debug(
            "pricing.priced",
            room_type_id=room_type.pk,
            nights=len(nights),
            rooms=rooms_booked,
            subtotal=subtotal,
            deposit_required=deposit_required,
        )
        return PriceBreakdown(
            room_type_id=room_type.pk,
            rooms_booked=rooms_booked,
            nights=tuple(nights),
            per_night_amounts=per_night_amounts,
            subtotal=subtotal,
            deposit_required=deposit_required,
        )
