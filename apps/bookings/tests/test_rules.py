"""Tests for per-classification advance-booking windows."""

from __future__ import annotations

from datetime import timedelta

import pytest

from apps.bookings.rules import BookingRulesValidator
from conftest import TODAY
from shared.domain import errors

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "classification, days_ahead",
    [("standard", 90), ("standard", 3), ("priority", 365), ("priority", 2), ("organizational", 180), ("organizational", 1)],
)
def test_window_bounds_are_inclusive(guest_rules, classification, days_ahead):
    start = TODAY + timedelta(days=days_ahead)

    assert BookingRulesValidator().validate(classification, start, TODAY) == days_ahead


def test_too_far_in_advance(guest_rules):
    with pytest.raises(errors.RuleViolation) as excinfo:
        BookingRulesValidator().validate("standard", TODAY + timedelta(days=91), TODAY)

    assert str(excinfo.value).startswith("Too far in advance")


@pytest.mark.parametrize("days_ahead", [2, 0, -5])
def test_insufficient_notice(guest_rules, days_ahead):
    with pytest.raises(errors.RuleViolation) as excinfo:
        BookingRulesValidator().validate("standard", TODAY + timedelta(days=days_ahead), TODAY)

    assert str(excinfo.value).startswith("Insufficient notice")


def test_unknown_classification_is_a_configuration_error(guest_rules):
    with pytest.raises(errors.ConfigurationError):
        BookingRulesValidator().validate("vip", TODAY + timedelta(days=10), TODAY)
