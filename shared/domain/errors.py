"""
Booking Engine Errors

Typed failures raised by the engine. Every error carries a stable ``code``
and a human readable message; API layers surface the message verbatim
instead of rephrasing it.

Ordering of checks during booking creation:
    ValidationError -> RuleViolation -> PricingRejected -> InsufficientInventory
so that request, rule and pricing failures never touch inventory.
"""

from __future__ import annotations

from datetime import date


class BookingEngineError(Exception):
    """Base class for all engine errors."""

    code = 'booking_engine_error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(BookingEngineError):
    """Malformed request: bad date range, non-positive room count."""

    code = 'validation_error'


class RuleViolation(BookingEngineError):
    """Request falls outside the guest's advance-booking window."""

    code = 'rule_violation'


class PricingRejected(BookingEngineError):
    """A night in the requested range is blocked for sale."""

    code = 'pricing_rejected'

    def __init__(self, blocked_date: date, message: str | None = None):
        self.date = blocked_date
        super().__init__(message or f"Bookings are not accepted for {blocked_date.isoformat()}.")


class InsufficientInventory(BookingEngineError):
    """Not enough rooms left; names the first night that lacked capacity."""

    code = 'insufficient_inventory'

    def __init__(self, failing_date: date, message: str | None = None):
        self.date = failing_date
        super().__init__(message or f"Sold out for {failing_date.isoformat()}.")


class InventoryHorizonExceeded(BookingEngineError):
    """A night lies beyond the seeded inventory horizon."""

    code = 'inventory_horizon_exceeded'

    def __init__(self, failing_date: date):
        self.date = failing_date
        super().__init__(f"Date {failing_date.isoformat()} is beyond the inventory horizon.")


class InvalidTransition(BookingEngineError):
    """Lifecycle operation attempted from the wrong state."""

    code = 'invalid_transition'

    def __init__(self, current: str, target: str, message: str | None = None):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot move booking from {current} to {target}.")


class ConfigurationError(BookingEngineError):
    """Operator misconfiguration: missing deposit band, unknown guest classification."""

    code = 'configuration_error'


class NotFound(BookingEngineError):
    """Referenced booking or room type does not exist."""

    code = 'not_found'
