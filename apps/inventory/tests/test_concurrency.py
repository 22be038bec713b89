"""Concurrent reservations from several threads, each on its own connection.

Runs on the default SQLite test database (writers queue on the database
lock) and on PostgreSQL when ``DB_ENGINE`` selects it.
"""

from __future__ import annotations

import threading
from datetime import date

import pytest
from django.db import connections

from apps.inventory.models import InventoryDay, RoomType
from shared.application.uow import retry_on_serialization_failure
from shared.domain import errors
from shared.domain.value_objects import DateRange

pytestmark = pytest.mark.django_db(transaction=True)


def _run_concurrently(ledger, room_type_id, stay, count, workers):
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        try:
            retry_on_serialization_failure(ledger.reserve, room_type_id, stay, count, attempts=5)
            result = "ok"
        except errors.InsufficientInventory as exc:
            result = exc.date
        finally:
            connections.close_all()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


def test_concurrent_single_room_requests_never_oversell(ledger):
    room_type = RoomType.objects.create(name="Standard", base_rate=10000, total_rooms=5)
    stay = DateRange(date(2025, 11, 1), date(2025, 11, 3))

    outcomes = _run_concurrently(ledger, room_type.pk, stay, 1, workers=12)

    assert outcomes.count("ok") == 5
    assert len(outcomes) == 12
    for day in InventoryDay.objects.filter(room_type=room_type):
        assert day.available_rooms == 0


def test_two_concurrent_double_reservations_on_a_two_room_day(ledger):
    room_type = RoomType.objects.create(name="Deluxe", base_rate=15000, total_rooms=20)
    InventoryDay.objects.create(room_type=room_type, date=date(2025, 11, 1), available_rooms=2)
    stay = DateRange(date(2025, 11, 1), date(2025, 11, 2))

    outcomes = _run_concurrently(ledger, room_type.pk, stay, 2, workers=2)

    assert sorted(outcomes, key=str) == sorted(["ok", date(2025, 11, 1)], key=str)
    assert InventoryDay.objects.get(room_type=room_type).available_rooms == 0
