"""Calendar rate store: effective per-night modifier for a room type."""

from __future__ import annotations

from datetime import date
from typing import Dict

import structlog
from django.db.models import Q  # type: ignore

from shared.domain import errors
from shared.domain.value_objects import DateRange

from .domain.modifiers import Blocked, FixedRate, Multiplier, NoModifier, RateModifier
from .models import CalendarOverride

logger = structlog.get_logger(__name__)


def to_modifier(override: CalendarOverride) -> RateModifier:
    if override.rule_kind == CalendarOverride.RuleKind.BLOCKED:
        return Blocked()
    if override.rule_kind == CalendarOverride.RuleKind.RATE_OVERRIDE:
        if override.rate_mode == CalendarOverride.RateMode.MULTIPLIER:
            return Multiplier(override.rate_value)
        if override.rate_mode == CalendarOverride.RateMode.FIXED:
            if override.rate_value == override.rate_value.to_integral_value():
                return FixedRate(int(override.rate_value))
            logger.error("rates.fractional_fixed_rate", override_id=override.pk, rate_value=str(override.rate_value))
            raise errors.ConfigurationError(
                f"Calendar override {override.pk} for {override.date.isoformat()} has a fractional fixed rate."
            )
    logger.error("rates.override_misconfigured", override_id=override.pk, date=override.date.isoformat())
    raise errors.ConfigurationError(f"Calendar override {override.pk} for {override.date.isoformat()} is incomplete.")


class CalendarRateStore:
    """
    Looks up active calendar overrides.

    Lookup order for a night: the room type's own override, else the
    blanket (all room types) override, else NoModifier.
    """

    def _active(self, room_type_id):
        return CalendarOverride.objects.filter(active=True).filter(
            Q(room_type_id=room_type_id) | Q(room_type__isnull=True)
        )

    def effective_modifier(self, room_type_id, day: date) -> RateModifier:
        return self._resolve(self._active(room_type_id).filter(date=day)).get(day, NoModifier())

    def modifiers_for_range(self, room_type_id, dates: DateRange) -> Dict[date, RateModifier]:
        """Modifier for every night of ``dates`` with a single query"""
        resolved = self._resolve(
            self._active(room_type_id).filter(date__gte=dates.start_date, date__lt=dates.end_date)
        )
        return {night: resolved.get(night, NoModifier()) for night in dates.nights()}

    def _resolve(self, overrides) -> Dict[date, RateModifier]:
        specific: Dict[date, CalendarOverride] = {}
        blanket: Dict[date, CalendarOverride] = {}
        for override in overrides:
            target = blanket if override.room_type_id is None else specific
            target[override.date] = override

        merged = {**blanket, **specific}
        return {day: to_modifier(override) for day, override in merged.items()}
