"""Waitlist services: joining, availability checks and notifying waiting guests."""

from __future__ import annotations

from datetime import timedelta
from typing import List

import structlog
from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain import events as booking_events
from apps.inventory.ledger import InventoryLedger
from apps.inventory.models import RoomType
from shared.application.uow import DjangoUnitOfWork
from shared.domain import errors
from shared.domain.value_objects import DateRange

from .events import WaitlistSpotAvailable
from .models import WaitlistEntry

logger = structlog.get_logger(__name__)

MAX_WAITLIST_NIGHTS = 30

Status = WaitlistEntry.Status


def _get(entry_id) -> WaitlistEntry:
    try:
        return WaitlistEntry.objects.get(pk=entry_id)
    except (WaitlistEntry.DoesNotExist, ValueError):
        raise errors.NotFound(f"Waitlist entry {entry_id} does not exist.")


def join(guest_id: str, room_type_id, dates: DateRange, rooms_requested: int = 1, notes: str = "", today=None) -> WaitlistEntry:
    """
    Put a guest on the waitlist for a stay.

    Raises:
        ValidationError: bad room count, stay too long or in the past, or
            the guest already waits for the same stay
        NotFound: unknown room type
    """
    if not guest_id:
        raise errors.ValidationError("Guest id is required.")
    if isinstance(rooms_requested, bool) or not isinstance(rooms_requested, int) or rooms_requested < 1:
        raise errors.ValidationError("Room count must be a positive integer.")
    if len(dates) > MAX_WAITLIST_NIGHTS:
        raise errors.ValidationError(f"Waitlisted stays cannot exceed {MAX_WAITLIST_NIGHTS} nights.")
    if dates.start_date < (today or timezone.localdate()):
        raise errors.ValidationError("Check-in date cannot be in the past.")
    if not RoomType.objects.filter(pk=room_type_id).exists():
        raise errors.NotFound(f"Room type {room_type_id} does not exist.")

    with transaction.atomic():
        duplicate = WaitlistEntry.objects.filter(
            guest_id=guest_id,
            room_type_id=room_type_id,
            start_date=dates.start_date,
            end_date=dates.end_date,
            status__in=WaitlistEntry.ACTIVE_STATUSES,
        ).exists()
        if duplicate:
            raise errors.ValidationError("Guest is already on the waitlist for these dates and room type.")

        entry = WaitlistEntry.objects.create(
            room_type_id=room_type_id,
            guest_id=guest_id,
            start_date=dates.start_date,
            end_date=dates.end_date,
            rooms_requested=rooms_requested,
            notes=notes,
        )

    logger.info(
        "waitlist.joined",
        entry_id=entry.pk,
        guest_id=guest_id,
        room_type_id=room_type_id,
        nights=len(dates),
        rooms=rooms_requested,
    )
    return entry


def check_availability(entry: WaitlistEntry, ledger: InventoryLedger | None = None) -> bool:
    """True when every night of the entry's stay has the requested rooms free right now."""

    ledger = ledger or InventoryLedger()
    try:
        nights = ledger.availability(entry.room_type_id, entry.dates)
    except errors.InventoryHorizonExceeded:
        return False
    return all(available >= entry.rooms_requested for available in nights.values())


def notify(entry_id, expires_in_hours: int | None = None, now=None) -> WaitlistEntry:
    """
    WAITING -> NOTIFIED and publish WaitlistSpotAvailable after commit.

    The guest has ``expires_in_hours`` (default WAITLIST_NOTIFICATION_HOURS)
    to book before the entry expires. Nothing is reserved for them.
    """
    hours = expires_in_hours or settings.BOOKING_ENGINE["WAITLIST_NOTIFICATION_HOURS"]
    now = now or timezone.now()

    with DjangoUnitOfWork() as uow:
        entry = _get(entry_id)
        moved = WaitlistEntry.objects.filter(pk=entry.pk, status=Status.WAITING).update(
            status=Status.NOTIFIED,
            notified_at=now,
            expires_at=now + timedelta(hours=hours),
            updated_at=now,
        )
        if moved == 0:
            entry.refresh_from_db()
            raise errors.InvalidTransition(
                entry.status,
                Status.NOTIFIED,
                f"Waitlist entry {entry.pk} is {entry.status}, not WAITING.",
            )
        entry.refresh_from_db()
        uow.add_event(WaitlistSpotAvailable(
            entry_id=entry.pk,
            guest_id=entry.guest_id,
            room_type_id=entry.room_type_id,
            start_date=entry.start_date,
            end_date=entry.end_date,
            rooms_requested=entry.rooms_requested,
            expires_at=entry.expires_at,
        ))

    logger.info("waitlist.notified", entry_id=entry.pk, guest_id=entry.guest_id, expires_at=entry.expires_at.isoformat())
    return entry


def leave(entry_id, guest_id: str | None = None) -> WaitlistEntry:
    """Take an active entry off the waitlist; ``guest_id`` restricts it to the owner."""

    entry = _get(entry_id)
    if guest_id is not None and entry.guest_id != guest_id:
        raise errors.NotFound(f"Waitlist entry {entry_id} does not exist.")

    moved = WaitlistEntry.objects.filter(pk=entry.pk, status__in=WaitlistEntry.ACTIVE_STATUSES).update(
        status=Status.EXPIRED,
        updated_at=timezone.now(),
    )
    entry.refresh_from_db()
    if moved == 0:
        raise errors.InvalidTransition(entry.status, Status.EXPIRED, f"Waitlist entry {entry.pk} is no longer active.")

    logger.info("waitlist.left", entry_id=entry.pk, guest_id=entry.guest_id)
    return entry


def expire_notified(now=None) -> int:
    """NOTIFIED entries past ``expires_at`` -> EXPIRED; returns how many expired."""

    now = now or timezone.now()
    expired = WaitlistEntry.objects.filter(status=Status.NOTIFIED, expires_at__lte=now).update(
        status=Status.EXPIRED,
        updated_at=now,
    )
    if expired:
        logger.info("waitlist.entries_expired", expired=expired)
    return expired


# ============================================================================
# BOOKING EVENT SUBSCRIBERS
# ============================================================================

def offer_freed_rooms(event: booking_events.BookingCancelled, ledger: InventoryLedger | None = None) -> List[WaitlistEntry]:
    """
    Notify waiting guests whose stay the cancellation made bookable.

    Entries are served oldest first and together never claim more rooms
    than the cancellation freed.
    """
    rooms_left = event.rooms_booked
    candidates = WaitlistEntry.objects.filter(
        room_type_id=event.room_type_id,
        status=Status.WAITING,
        start_date__lt=event.end_date,
        end_date__gt=event.start_date,
        rooms_requested__lte=rooms_left,
    ).order_by("created_at", "pk")

    notified: List[WaitlistEntry] = []
    for entry in candidates:
        if entry.rooms_requested > rooms_left or not check_availability(entry, ledger):
            continue
        try:
            notified.append(notify(entry.pk))
        except errors.InvalidTransition:
            logger.info("waitlist.notify_skipped", entry_id=entry.pk)
            continue
        rooms_left -= entry.rooms_requested
        if rooms_left == 0:
            break

    if notified:
        logger.info("waitlist.freed_rooms_offered", booking_id=str(event.booking_id), notified=len(notified))
    return notified


def mark_converted(event: booking_events.BookingCreated) -> int:
    """A guest booked the stay they were waiting for: their active entries -> CONVERTED."""

    converted = WaitlistEntry.objects.filter(
        guest_id=event.guest_id,
        room_type_id=event.room_type_id,
        start_date=event.start_date,
        end_date=event.end_date,
        status__in=WaitlistEntry.ACTIVE_STATUSES,
    ).update(status=Status.CONVERTED, updated_at=timezone.now())
    if converted:
        logger.info("waitlist.converted", booking_id=str(event.booking_id), guest_id=event.guest_id)
    return converted
