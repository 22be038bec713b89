"""
Rate Modifiers

Closed set of per-night results from the calendar rate store:
- NoModifier: base rate applies
- Blocked: the night cannot be sold
- Multiplier: base rate times a factor, rounded half-up
- FixedRate: replaces the base rate

Consumers dispatch with ``apply_modifier``; an unknown variant is a
programming error and raises TypeError rather than pricing silently.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from shared.domain.base import ValueObject
from shared.domain.value_objects import round_half_up


@dataclass(frozen=True)
class NoModifier(ValueObject):
    kind = 'none'

    def describe(self) -> dict:
        return {'kind': self.kind}


@dataclass(frozen=True)
class Blocked(ValueObject):
    kind = 'blocked'

    def describe(self) -> dict:
        return {'kind': self.kind}


@dataclass(frozen=True)
class Multiplier(ValueObject):
    factor: Decimal
    kind = 'multiplier'

    def __post_init__(self):
        if not isinstance(self.factor, Decimal):
            object.__setattr__(self, 'factor', Decimal(str(self.factor)))
        if self.factor < 0:
            raise ValueError("Rate multiplier cannot be negative")

    def describe(self) -> dict:
        return {'kind': self.kind, 'value': str(self.factor)}


@dataclass(frozen=True)
class FixedRate(ValueObject):
    amount: int
    kind = 'fixed'

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("Fixed rate cannot be negative")

    def describe(self) -> dict:
        return {'kind': self.kind, 'value': self.amount}


RateModifier = Union[NoModifier, Blocked, Multiplier, FixedRate]


def apply_modifier(base_rate: int, modifier: RateModifier) -> int | None:
    """
    Nightly per-room rate for ``base_rate`` under ``modifier``.

    Returns None for a blocked night.
    """
    if isinstance(modifier, NoModifier):
        return base_rate
    if isinstance(modifier, Blocked):
        return None
    if isinstance(modifier, Multiplier):
        return round_half_up(Decimal(base_rate) * modifier.factor)
    if isinstance(modifier, FixedRate):
        return modifier.amount
    raise TypeError(f"Unknown rate modifier: {modifier!r}")
