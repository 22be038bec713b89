"""
Common Value Objects

Value objects used across the booking engine:
- DateRange: a half-open range of nights (check-in to check-out)
- round_half_up: integer rounding used for every money amount
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator

from shared.domain.base import ValueObject
from shared.domain.errors import ValidationError


def round_half_up(value: Decimal) -> int:
    """Round to a whole minor-currency unit, halves away from zero"""
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    The end date is the checkout day, so its night is never part of the stay.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if not isinstance(self.start_date, date) or not isinstance(self.end_date, date):
            raise ValidationError("Start and end dates are required.")
        if self.start_date >= self.end_date:
            raise ValidationError(
                f"Start date ({self.start_date.isoformat()}) must be before "
                f"end date ({self.end_date.isoformat()})."
            )

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Note: end_date is exclusive, so adjacent ranges don't overlap.
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date < self.end_date

    def nights(self) -> Iterator[date]:
        """Yield every night of the stay in ascending order"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    @property
    def last_night(self) -> date:
        return self.end_date - timedelta(days=1)

    def __len__(self) -> int:
        """Number of nights"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"[{self.start_date.isoformat()}, {self.end_date.isoformat()})"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
