"""Shared pytest fixtures for the booking engine."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.models import GuestBookingRule
from apps.inventory.ledger import InventoryLedger
from apps.inventory.models import RoomType
from apps.rates.models import DepositPolicy

TODAY = date(2025, 10, 1)


@pytest.fixture
def deluxe(db) -> RoomType:
    return RoomType.objects.create(name="Deluxe", base_rate=15000, total_rooms=20)


@pytest.fixture
def ledger() -> InventoryLedger:
    return InventoryLedger(horizon_days=365, today=lambda: TODAY)


@pytest.fixture
def standard_bands(db):
    DepositPolicy.objects.create(min_rooms=2, max_rooms=9, deposit_type="PERCENT", value=Decimal("10"))
    DepositPolicy.objects.create(min_rooms=10, max_rooms=19, deposit_type="PERCENT", value=Decimal("20"))
    DepositPolicy.objects.create(min_rooms=20, max_rooms=9999, deposit_type="PERCENT", value=Decimal("30"))


@pytest.fixture
def guest_rules(db):
    GuestBookingRule.objects.create(classification="standard", max_days_advance=90, min_days_notice=3)
    GuestBookingRule.objects.create(classification="priority", max_days_advance=365, min_days_notice=2)
    GuestBookingRule.objects.create(classification="organizational", max_days_advance=180, min_days_notice=1)
