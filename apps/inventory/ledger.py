"""
Inventory Ledger

This is the CRITICAL component for preventing oversell.
All changes to per-night room counters MUST go through the ledger.

Strategy:
1. Conditional update: every night is decremented with
   ``UPDATE ... SET available_rooms = available_rooms - n
   WHERE available_rooms >= n``; a zero row count means sold out.
2. Transaction: all nights of one call run inside one
   ``transaction.atomic()`` block, so a failing night rolls back the
   nights already decremented by the same call.
3. Database constraint: ``available_rooms >= 0`` is a CHECK constraint.

There is no read-then-write anywhere on the reservation path.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Dict, List

import structlog
from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import F, Value  # type: ignore
from django.db.models.functions import Least  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import lock_queryset_if_possible
from shared.domain import errors
from shared.domain.value_objects import DateRange

from .models import InventoryDay, RoomType

logger = structlog.get_logger(__name__)


def _validate_count(count) -> None:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise errors.ValidationError("Room count must be a positive integer.")


class InventoryLedger:
    """
    Per-night room counters for every room type.

    Missing rows inside the seeded horizon (``today + INVENTORY_HORIZON_DAYS``)
    count as fully available and are inserted on first use. Missing rows
    beyond the horizon are a hard failure.

    Usage:
        ledger = InventoryLedger()
        ledger.reserve(room_type.id, DateRange(check_in, check_out), 2)
        ...
        ledger.release(room_type.id, DateRange(check_in, check_out), 2)
    """

    def __init__(self, horizon_days: int | None = None, today: Callable[[], date] = timezone.localdate):
        if horizon_days is None:
            horizon_days = settings.BOOKING_ENGINE['INVENTORY_HORIZON_DAYS']
        self.horizon_days = horizon_days
        self._today = today

    @property
    def horizon_end(self) -> date:
        """Last night that may be created lazily"""
        return self._today() + timedelta(days=self.horizon_days)

    def _get_room_type(self, room_type_id) -> RoomType:
        try:
            return RoomType.objects.get(pk=room_type_id)
        except RoomType.DoesNotExist:
            raise errors.NotFound(f"Room type {room_type_id} does not exist.")

    def _days(self, room_type_id, dates: DateRange):
        return InventoryDay.objects.filter(
            room_type_id=room_type_id,
            date__gte=dates.start_date,
            date__lt=dates.end_date,
        )

    def _ensure_rows(self, room_type: RoomType, dates: DateRange, *, enforce_horizon: bool = True) -> None:
        """
        Insert missing rows at ``total_rooms``.

        ``ignore_conflicts`` makes concurrent inserts of the same night safe:
        the loser's insert becomes a no-op and its conditional update then
        sees the winner's row.
        """
        existing = set(self._days(room_type.pk, dates).values_list('date', flat=True))
        missing = [night for night in dates.nights() if night not in existing]
        if not missing:
            return

        if enforce_horizon:
            horizon_end = self.horizon_end
            for night in missing:
                if night > horizon_end:
                    logger.info(
                        "inventory.horizon_exceeded",
                        room_type_id=room_type.pk,
                        date=night.isoformat(),
                        horizon_end=horizon_end.isoformat(),
                    )
                    raise errors.InventoryHorizonExceeded(night)

        InventoryDay.objects.bulk_create(
            [
                InventoryDay(room_type=room_type, date=night, available_rooms=room_type.total_rooms)
                for night in missing
            ],
            ignore_conflicts=True,
        )
        logger.debug("inventory.rows_created", room_type_id=room_type.pk, nights=len(missing))

    def reserve(self, room_type_id, dates: DateRange, count: int) -> None:
        """
        Take ``count`` rooms for every night of ``dates``, or none at all.

        Raises:
            ValidationError: count is not a positive integer
            NotFound: unknown room type
            InventoryHorizonExceeded: a night lies beyond the seeded horizon
            InsufficientInventory: first night (ascending) without capacity
        """
        _validate_count(count)

        with transaction.atomic():
            room_type = self._get_room_type(room_type_id)
            self._ensure_rows(room_type, dates)

            # Ascending order: every caller locks rows in the same order.
            for night in dates.nights():
                updated = InventoryDay.objects.filter(
                    room_type_id=room_type.pk,
                    date=night,
                    available_rooms__gte=count,
                ).update(available_rooms=F('available_rooms') - count)

                if updated == 0:
                    logger.info(
                        "inventory.sold_out",
                        room_type_id=room_type.pk,
                        date=night.isoformat(),
                        requested=count,
                    )
                    raise errors.InsufficientInventory(night)

        logger.info(
            "inventory.reserved",
            room_type_id=room_type.pk,
            start_date=dates.start_date.isoformat(),
            end_date=dates.end_date.isoformat(),
            rooms=count,
        )

    def release(self, room_type_id, dates: DateRange, count: int) -> None:
        """
        Give ``count`` rooms back for every night of ``dates``.

        Counters never rise above ``total_rooms``. A release that would push
        a night past the total is clamped and reported as an invariant
        violation, since it means rooms were returned that were never taken.
        """
        _validate_count(count)

        with transaction.atomic():
            room_type = self._get_room_type(room_type_id)
            self._ensure_rows(room_type, dates, enforce_horizon=False)

            days = self._days(room_type.pk, dates)
            overflow = lock_queryset_if_possible(
                days.filter(available_rooms__gt=room_type.total_rooms - count)
            )
            overflow_dates = [night.isoformat() for night in overflow.values_list('date', flat=True)]

            days.update(
                available_rooms=Least(F('available_rooms') + count, Value(room_type.total_rooms))
            )

        if overflow_dates:
            logger.error(
                "inventory.invariant_violation",
                room_type_id=room_type.pk,
                dates=overflow_dates,
                released=count,
                total_rooms=room_type.total_rooms,
            )

        logger.info(
            "inventory.released",
            room_type_id=room_type.pk,
            start_date=dates.start_date.isoformat(),
            end_date=dates.end_date.isoformat(),
            rooms=count,
        )

    def availability(self, room_type_id, dates: DateRange) -> Dict[date, int]:
        """
        Read-only preview of rooms left per night.

        Takes no locks and writes nothing; a later reservation re-checks
        every night itself.
        """
        room_type = self._get_room_type(room_type_id)
        stored = dict(self._days(room_type.pk, dates).values_list('date', 'available_rooms'))

        horizon_end = self.horizon_end
        result: Dict[date, int] = {}
        for night in dates.nights():
            if night in stored:
                result[night] = stored[night]
            elif night > horizon_end:
                raise errors.InventoryHorizonExceeded(night)
            else:
                result[night] = room_type.total_rooms
        return result

    def set_available(self, room_type_id, dates: DateRange, available_rooms: int, *, actor: str, reason: str = ""):
        """
        Administrative bulk edit: set every night of ``dates`` to
        ``available_rooms``. Produces exactly one audit entry.
        """
        from apps.audit import services as audit
        from apps.audit.models import AuditEntry

        if isinstance(available_rooms, bool) or not isinstance(available_rooms, int) or available_rooms < 0:
            raise errors.ValidationError("Available rooms must be a non-negative integer.")

        with transaction.atomic():
            room_type = self._get_room_type(room_type_id)
            if available_rooms > room_type.total_rooms:
                raise errors.ValidationError(
                    f"Available rooms ({available_rooms}) cannot exceed the "
                    f"{room_type.total_rooms} rooms of {room_type.name}."
                )

            self._ensure_rows(room_type, dates, enforce_horizon=False)
            days = lock_queryset_if_possible(self._days(room_type.pk, dates))
            before = {night.isoformat(): count for night, count in days.values_list('date', 'available_rooms')}

            updated = self._days(room_type.pk, dates).update(available_rooms=available_rooms)

            entry = audit.record(
                actor=actor,
                action=AuditEntry.Action.INVENTORY_BULK_EDIT,
                before={'available_rooms': before},
                after={'available_rooms': {night: available_rooms for night in before}},
                reason=reason,
                metadata={
                    'room_type_id': room_type.pk,
                    'start_date': dates.start_date.isoformat(),
                    'end_date': dates.end_date.isoformat(),
                },
            )

        logger.info(
            "inventory.bulk_edit",
            room_type_id=room_type.pk,
            start_date=dates.start_date.isoformat(),
            end_date=dates.end_date.isoformat(),
            available_rooms=available_rooms,
            nights=updated,
            actor=actor,
        )
        return entry

    def seed(self, room_type_id, through: date) -> int:
        """
        Create missing rows from today up to and including ``through``.

        Returns the number of nights that were missing.
        """
        room_type = self._get_room_type(room_type_id)
        start = self._today()
        if through < start:
            return 0

        dates = DateRange(start, through + timedelta(days=1))
        existing = set(self._days(room_type.pk, dates).values_list('date', flat=True))
        missing: List[date] = [night for night in dates.nights() if night not in existing]
        if missing:
            InventoryDay.objects.bulk_create(
                [
                    InventoryDay(room_type=room_type, date=night, available_rooms=room_type.total_rooms)
                    for night in missing
                ],
                ignore_conflicts=True,
                batch_size=500,
            )
        logger.info("inventory.seeded", room_type_id=room_type.pk, through=through.isoformat(), created=len(missing))
        return len(missing)
