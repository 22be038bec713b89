"""Tests for the inventory ledger's reserve/release discipline."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from apps.audit.models import AuditEntry
from apps.inventory.ledger import InventoryLedger
from apps.inventory.models import InventoryDay, RoomType
from shared.domain import errors
from shared.domain.value_objects import DateRange

pytestmark = pytest.mark.django_db


def _available(room_type: RoomType, day: date) -> int:
    return InventoryDay.objects.get(room_type=room_type, date=day).available_rooms


def test_reserve_creates_missing_rows_and_decrements_every_night(deluxe, ledger):
    stay = DateRange(date(2025, 12, 24), date(2025, 12, 27))

    ledger.reserve(deluxe.pk, stay, 3)

    assert InventoryDay.objects.filter(room_type=deluxe).count() == 3
    for night in stay.nights():
        assert _available(deluxe, night) == 17
    # Checkout night is not part of the stay
    assert not InventoryDay.objects.filter(room_type=deluxe, date=date(2025, 12, 27)).exists()


def test_reserve_is_all_or_nothing(deluxe, ledger):
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 11, 2), available_rooms=1)
    stay = DateRange(date(2025, 11, 1), date(2025, 11, 4))

    with pytest.raises(errors.InsufficientInventory) as excinfo:
        ledger.reserve(deluxe.pk, stay, 2)

    assert excinfo.value.date == date(2025, 11, 2)
    assert str(excinfo.value) == "Sold out for 2025-11-02."
    # The night before the failing one was rolled back with its lazily created row
    assert ledger.availability(deluxe.pk, stay) == {
        date(2025, 11, 1): 20,
        date(2025, 11, 2): 1,
        date(2025, 11, 3): 20,
    }
    assert InventoryDay.objects.filter(room_type=deluxe).count() == 1


def test_sequential_requests_never_oversell(ledger):
    room_type = RoomType.objects.create(name="Suite", base_rate=50000, total_rooms=3)
    night = DateRange(date(2025, 11, 1), date(2025, 11, 2))

    outcomes = []
    for _ in range(5):
        try:
            ledger.reserve(room_type.pk, night, 1)
            outcomes.append("ok")
        except errors.InsufficientInventory as exc:
            outcomes.append(exc.date)

    assert outcomes.count("ok") == 3
    assert outcomes[3:] == [date(2025, 11, 1), date(2025, 11, 1)]
    assert _available(room_type, date(2025, 11, 1)) == 0


def test_two_room_day_accepts_one_of_two_double_reservations(deluxe, ledger):
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 11, 1), available_rooms=2)
    night = DateRange(date(2025, 11, 1), date(2025, 11, 2))

    ledger.reserve(deluxe.pk, night, 2)
    with pytest.raises(errors.InsufficientInventory) as excinfo:
        ledger.reserve(deluxe.pk, night, 2)

    assert excinfo.value.date == date(2025, 11, 1)
    assert _available(deluxe, date(2025, 11, 1)) == 0


def test_reserve_then_release_restores_counts(deluxe, ledger):
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 11, 3), available_rooms=7)
    stay = DateRange(date(2025, 11, 1), date(2025, 11, 5))
    before = ledger.availability(deluxe.pk, stay)

    ledger.reserve(deluxe.pk, stay, 4)
    ledger.release(deluxe.pk, stay, 4)

    assert ledger.availability(deluxe.pk, stay) == before


def test_release_is_clamped_at_total_rooms(deluxe, ledger):
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 11, 1), available_rooms=19)
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 11, 2), available_rooms=10)

    ledger.release(deluxe.pk, DateRange(date(2025, 11, 1), date(2025, 11, 3)), 5)

    assert _available(deluxe, date(2025, 11, 1)) == 20
    assert _available(deluxe, date(2025, 11, 2)) == 15


@pytest.mark.parametrize("count", [0, -1, True, 1.5])
def test_reserve_rejects_non_positive_counts(deluxe, ledger, count):
    with pytest.raises(errors.ValidationError):
        ledger.reserve(deluxe.pk, DateRange(date(2025, 11, 1), date(2025, 11, 2)), count)
    assert not InventoryDay.objects.exists()


def test_zero_length_range_is_rejected():
    with pytest.raises(errors.ValidationError):
        DateRange(date(2025, 11, 1), date(2025, 11, 1))


def test_unknown_room_type(ledger):
    with pytest.raises(errors.NotFound):
        ledger.reserve(999, DateRange(date(2025, 11, 1), date(2025, 11, 2)), 1)


def test_missing_rows_beyond_horizon_are_rejected(deluxe):
    ledger = InventoryLedger(horizon_days=30, today=lambda: date(2025, 10, 1))
    stay = DateRange(date(2025, 10, 30), date(2025, 11, 3))

    with pytest.raises(errors.InventoryHorizonExceeded) as excinfo:
        ledger.reserve(deluxe.pk, stay, 1)

    assert excinfo.value.date == date(2025, 11, 1)
    assert not InventoryDay.objects.exists()


def test_seeded_rows_beyond_horizon_can_be_reserved(deluxe):
    ledger = InventoryLedger(horizon_days=0, today=lambda: date(2025, 10, 1))
    InventoryDay.objects.create(room_type=deluxe, date=date(2026, 1, 1), available_rooms=5)

    ledger.reserve(deluxe.pk, DateRange(date(2026, 1, 1), date(2026, 1, 2)), 5)

    assert _available(deluxe, date(2026, 1, 1)) == 0


def test_availability_preview_does_not_write(deluxe, ledger):
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 11, 2), available_rooms=4)

    preview = ledger.availability(deluxe.pk, DateRange(date(2025, 11, 1), date(2025, 11, 3)))

    assert preview == {date(2025, 11, 1): 20, date(2025, 11, 2): 4}
    assert InventoryDay.objects.count() == 1


def test_bulk_edit_sets_every_night_and_writes_one_audit_entry(deluxe, ledger):
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 11, 1), available_rooms=12)
    stay = DateRange(date(2025, 11, 1), date(2025, 11, 4))

    entry = ledger.set_available(deluxe.pk, stay, 8, actor="ops", reason="Renovation on floor 3")

    assert [day.available_rooms for day in InventoryDay.objects.filter(room_type=deluxe)] == [8, 8, 8]
    assert AuditEntry.objects.count() == 1
    assert entry.action == AuditEntry.Action.INVENTORY_BULK_EDIT
    assert entry.booking_id is None
    assert entry.actor == "ops"
    assert entry.before["available_rooms"]["2025-11-01"] == 12
    assert entry.before["available_rooms"]["2025-11-02"] == 20
    assert entry.after["available_rooms"]["2025-11-03"] == 8


def test_bulk_edit_cannot_exceed_total_rooms(deluxe, ledger):
    with pytest.raises(errors.ValidationError):
        ledger.set_available(deluxe.pk, DateRange(date(2025, 11, 1), date(2025, 11, 2)), 21, actor="ops")
    assert not AuditEntry.objects.exists()


def test_seed_creates_only_missing_rows(deluxe, ledger):
    InventoryDay.objects.create(room_type=deluxe, date=date(2025, 10, 2), available_rooms=3)

    created = ledger.seed(deluxe.pk, date(2025, 10, 1) + timedelta(days=4))

    assert created == 4
    assert InventoryDay.objects.filter(room_type=deluxe).count() == 5
    assert _available(deluxe, date(2025, 10, 2)) == 3
