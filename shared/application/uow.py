"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, TypeVar

import structlog
from django.conf import settings
from django.db import OperationalError, transaction
from django.db.utils import NotSupportedError

from shared.domain.base import DomainEvent

logger = structlog.get_logger(__name__)

T = TypeVar('T')

# Serialization failure and deadlock detected (PostgreSQL)
RETRYABLE_SQLSTATES = frozenset({'40001', '40P01'})


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @abstractmethod
    def add_event(self, event: DomainEvent):
        """Queue an event for publishing after commit"""
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Wraps a ``transaction.atomic()`` block. Everything written inside the
    block (inventory decrements, booking rows, payments, audit entries)
    commits or rolls back together; queued events are handed to the
    message bus through ``transaction.on_commit``.

    Usage:
        with DjangoUnitOfWork() as uow:
            ledger.reserve(room_type_id, dates, rooms)
            booking = Booking.objects.create(...)
            uow.add_event(BookingCreated(...))
        # Events are published after commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Schedule event publishing

        Events are published using Django's transaction.on_commit()
        to ensure they're only sent after database commit succeeds.
        """
        events = self._events.copy()
        self._events.clear()
        logger.debug("uow.commit", events=len(events))

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        if self._events:
            logger.info("uow.rollback", discarded_events=len(self._events))
        self._events.clear()

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to message bus

        Called after successful transaction commit. Subscriber failures
        never reach the caller: the state change is already durable.
        """
        from shared.application.message_bus import message_bus

        try:
            message_bus.publish_events(events)
        except Exception as e:
            logger.error("uow.publish_failed", error=str(e), exc_info=True)


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def is_serialization_failure(exc: OperationalError) -> bool:
    """True for conflicts that are safe to retry from scratch"""
    cause = exc.__cause__
    sqlstate = getattr(cause, 'sqlstate', None) or getattr(cause, 'pgcode', None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    return 'database is locked' in str(exc)


def retry_on_serialization_failure(func: Callable[..., T], *args, attempts: int | None = None, **kwargs) -> T:
    """
    Run ``func`` and re-run it when the database aborts it with a
    serialization conflict.

    ``func`` must open its own transaction, so a retry starts from scratch.
    Retrying is only possible at the outermost transaction: inside an
    enclosing atomic block the error is re-raised for the owner of that
    block to handle.
    """
    if attempts is None:
        attempts = settings.BOOKING_ENGINE['SERIALIZATION_RETRY_ATTEMPTS']

    attempt = 1
    while True:
        try:
            return func(*args, **kwargs)
        except OperationalError as exc:
            if (
                attempt >= attempts
                or transaction.get_connection().in_atomic_block
                or not is_serialization_failure(exc)
            ):
                raise
            logger.warning(
                "transaction.retry",
                operation=getattr(func, '__name__', repr(func)),
                attempt=attempt,
                error=str(exc),
            )
            attempt += 1
