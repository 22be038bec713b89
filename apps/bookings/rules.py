"""Booking rules validator: advance-booking windows per guest classification."""

from __future__ import annotations

from datetime import date

import structlog
from django.utils import timezone  # type: ignore

from shared.domain import errors

from .models import GuestBookingRule

logger = structlog.get_logger(__name__)


class BookingRulesValidator:
    """
    Rejects stays that start too far ahead or with too little notice.

    Both bounds are inclusive: a stay starting exactly ``max_days_advance``
    or exactly ``min_days_notice`` days after the request is accepted.
    """

    def validate(self, classification: str, start_date: date, request_date: date | None = None) -> int:
        """Return ``days_ahead`` or raise RuleViolation / ConfigurationError"""
        if request_date is None:
            request_date = timezone.localdate()

        try:
            rule = GuestBookingRule.objects.get(classification=classification)
        except GuestBookingRule.DoesNotExist:
            logger.error("rules.unknown_classification", classification=classification)
            raise errors.ConfigurationError(f"No booking rule for guest classification '{classification}'.")

        days_ahead = (start_date - request_date).days
        if days_ahead > rule.max_days_advance:
            raise errors.RuleViolation(
                f"Too far in advance: {classification} guests may book at most "
                f"{rule.max_days_advance} days ahead."
            )
        if days_ahead < rule.min_days_notice:
            raise errors.RuleViolation(
                f"Insufficient notice: {classification} guests must book at least "
                f"{rule.min_days_notice} days ahead."
            )
        return days_ahead
