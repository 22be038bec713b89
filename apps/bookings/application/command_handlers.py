"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate the rules validator, pricing engine, inventory ledger
and audit log within transactions.

Commands:
- CreateBookingCommand: Create a provisional booking and reserve inventory
- RecordPaymentCommand: Payment processor callback
- CancelBookingCommand: Cancel and release inventory (guest or admin)
- CheckInBookingCommand / CheckOutBookingCommand / CompleteBookingCommand
- RecordOfflinePaymentCommand: Admin records money received outside the processor
- ForceStatusCommand: Admin moves a booking along a legal transition
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Type
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.utils import timezone

from apps.audit import services as audit
from apps.audit.models import AuditEntry
from apps.bookings.domain import events
from apps.bookings.domain.entities import (
    TIMESTAMP_FIELDS,
    BookingStatus,
    ensure_transition,
)
from apps.bookings.models import Booking
from apps.bookings.rules import BookingRulesValidator
from apps.finances import services as finances
from apps.finances.models import Payment
from apps.inventory.ledger import InventoryLedger
from apps.rates.pricing import PricingEngine
from shared.application.uow import (
    DjangoUnitOfWork,
    lock_queryset_if_possible,
    retry_on_serialization_failure,
)
from shared.domain import errors
from shared.domain.value_objects import DateRange

logger = structlog.get_logger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    Guest id and classification come from the identity provider and are
    trusted as given.
    """
    room_type_id: int
    guest_id: str
    guest_classification: str
    start_date: date
    end_date: date
    rooms_booked: int = 1
    idempotency_key: str | None = None
    request_date: date | None = None


@dataclass
class RecordPaymentCommand:
    """Payment processor callback"""
    booking_id: UUID
    amount: int
    outcome: str  # 'succeeded' | 'failed'
    provider_reference: str | None = None
    actor: str = 'payment-processor'
    metadata: dict = field(default_factory=dict)


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking; ``admin`` marks an administrative override"""
    booking_id: UUID
    actor: str
    reason: str = ''
    admin: bool = False


@dataclass
class CheckInBookingCommand:
    booking_id: UUID
    actor: str


@dataclass
class CheckOutBookingCommand:
    booking_id: UUID
    actor: str


@dataclass
class CompleteBookingCommand:
    booking_id: UUID
    actor: str = 'system'


@dataclass
class RecordOfflinePaymentCommand:
    """Admin records cash, bank transfer or another payment taken outside the processor"""
    booking_id: UUID
    amount: int
    actor: str
    reason: str = ''
    reference: str | None = None


@dataclass
class ForceStatusCommand:
    """Admin moves a booking to ``target_status``; only legal transitions are accepted"""
    booking_id: UUID
    target_status: str
    actor: str
    reason: str = ''


@dataclass
class PaymentResult:
    booking: Booking
    payment: Payment
    confirmed: bool = False
    duplicate: bool = False


PAYMENT_OUTCOMES = {
    'succeeded': Payment.Status.SUCCEEDED,
    'failed': Payment.Status.FAILED,
}

TRANSITION_ACTIONS = {
    BookingStatus.CONFIRMED: AuditEntry.Action.BOOKING_CONFIRMED,
    BookingStatus.CHECKED_IN: AuditEntry.Action.BOOKING_CHECKED_IN,
    BookingStatus.CHECKED_OUT: AuditEntry.Action.BOOKING_CHECKED_OUT,
    BookingStatus.COMPLETED: AuditEntry.Action.BOOKING_COMPLETED,
    BookingStatus.CANCELLED: AuditEntry.Action.BOOKING_CANCELLED,
}

TRANSITION_EVENTS: Dict[BookingStatus, Type[events.BookingEvent]] = {
    BookingStatus.CONFIRMED: events.BookingConfirmed,
    BookingStatus.CHECKED_IN: events.BookingCheckedIn,
    BookingStatus.CHECKED_OUT: events.BookingCheckedOut,
    BookingStatus.COMPLETED: events.BookingCompleted,
    BookingStatus.CANCELLED: events.BookingCancelled,
}


def _validate_positive_int(value, message: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise errors.ValidationError(message)


def _event_fields(booking: Booking, actor: str) -> dict:
    return {
        'aggregate_id': booking.pk,
        'booking_id': booking.pk,
        'room_type_id': booking.room_type_id,
        'guest_id': booking.guest_id,
        'start_date': booking.start_date,
        'end_date': booking.end_date,
        'rooms_booked': booking.rooms_booked,
        'actor': actor,
    }


# ===== Lifecycle Manager =====

class BookingLifecycleManager:
    """
    Owns the reservation state machine.

    Every status change is a compare-and-set on the status the booking was
    read with (``UPDATE ... WHERE status = <current>``). Of two racing
    callers only one moves the booking; the other gets InvalidTransition.
    Inventory is therefore released at most once, and every transition
    writes exactly one audit entry in the same transaction.
    """

    def __init__(
        self,
        ledger: InventoryLedger | None = None,
        pricing: PricingEngine | None = None,
        rules: BookingRulesValidator | None = None,
    ):
        self.ledger = ledger or InventoryLedger()
        self.pricing = pricing or PricingEngine()
        self.rules = rules or BookingRulesValidator()

    # ----- creation -----

    def create(self, command: CreateBookingCommand) -> Booking:
        """
        Validate, price, reserve and persist a PROVISIONAL booking.

        Checks run in order so that request, rule and pricing failures never
        touch inventory:
            ValidationError -> RuleViolation -> PricingRejected -> InsufficientInventory
        """
        if not command.guest_id:
            raise errors.ValidationError("Guest id is required.")
        if not command.guest_classification:
            raise errors.ValidationError("Guest classification is required.")
        dates = DateRange(command.start_date, command.end_date)
        _validate_positive_int(command.rooms_booked, "Room count must be a positive integer.")

        if command.idempotency_key:
            existing = Booking.objects.filter(idempotency_key=command.idempotency_key).first()
            if existing is not None:
                logger.info("booking.idempotent_replay", booking_id=str(existing.pk))
                return existing

        days_ahead = self.rules.validate(command.guest_classification, dates.start_date, command.request_date)

        try:
            return retry_on_serialization_failure(self._create_in_transaction, command, dates, days_ahead)
        except IntegrityError:
            # A concurrent request with the same idempotency key won the insert;
            # our reservation was rolled back with the failed transaction.
            if command.idempotency_key:
                existing = Booking.objects.filter(idempotency_key=command.idempotency_key).first()
                if existing is not None:
                    logger.info("booking.idempotent_race_lost", booking_id=str(existing.pk))
                    return existing
            raise

    def _create_in_transaction(self, command: CreateBookingCommand, dates: DateRange, days_ahead: int) -> Booking:
        with DjangoUnitOfWork() as uow:
            breakdown = self.pricing.price(command.room_type_id, dates, command.rooms_booked)
            self.ledger.reserve(command.room_type_id, dates, command.rooms_booked)

            booking = Booking.objects.create(
                room_type_id=command.room_type_id,
                guest_id=command.guest_id,
                guest_classification=command.guest_classification,
                start_date=dates.start_date,
                end_date=dates.end_date,
                rooms_booked=command.rooms_booked,
                total_price=breakdown.total,
                deposit_required=breakdown.deposit_required,
                price_breakdown=breakdown.to_dict(),
                status=BookingStatus.PROVISIONAL.value,
                idempotency_key=command.idempotency_key or None,
            )

            audit.record(
                command.guest_id,
                AuditEntry.Action.BOOKING_CREATED,
                booking=booking,
                after=audit.snapshot(booking),
                metadata={'days_ahead': days_ahead, 'idempotency_key': command.idempotency_key},
            )
            uow.add_event(events.BookingCreated(
                **_event_fields(booking, command.guest_id),
                total_price=booking.total_price,
                deposit_required=booking.deposit_required,
            ))

        logger.info(
            "booking.created",
            booking_id=str(booking.pk),
            room_type_id=booking.room_type_id,
            rooms=booking.rooms_booked,
            total_price=booking.total_price,
            deposit_required=booking.deposit_required,
        )
        return booking

    # ----- transitions -----

    def _get(self, booking_id, lock: bool = False) -> Booking:
        try:
            queryset = Booking.objects.filter(pk=booking_id)
            if lock:
                queryset = lock_queryset_if_possible(queryset)
            return queryset.get()
        except (Booking.DoesNotExist, DjangoValidationError, ValueError):
            # Malformed ids are reported the same way as unknown ones
            raise errors.NotFound(f"Booking {booking_id} does not exist.")

    def _apply_transition(
        self,
        uow: DjangoUnitOfWork,
        booking: Booking,
        target: BookingStatus,
        *,
        actor: str,
        action: str | None = None,
        reason: str = '',
        metadata: dict | None = None,
        event_extra: dict | None = None,
    ) -> Booking:
        """
        Move ``booking`` to ``target`` inside the caller's unit of work.

        Raises InvalidTransition when the move is not in the table, or when
        another request changed the status first.
        """
        current = BookingStatus(booking.status)
        ensure_transition(current, target)

        before = audit.snapshot(booking)
        now = timezone.now()
        updates = {'status': target.value, TIMESTAMP_FIELDS[target]: now, 'updated_at': now}
        if target is BookingStatus.CANCELLED:
            updates['cancellation_reason'] = reason

        moved = Booking.objects.filter(pk=booking.pk, status=current.value).update(**updates)
        if moved == 0:
            latest = Booking.objects.filter(pk=booking.pk).values_list('status', flat=True).first()
            logger.info(
                "booking.transition_lost_race",
                booking_id=str(booking.pk),
                expected=current.value,
                found=latest,
                target=target.value,
            )
            raise errors.InvalidTransition(latest or current.value, target.value)

        if target is BookingStatus.CANCELLED:
            self.ledger.release(booking.room_type_id, booking.dates, booking.rooms_booked)

        booking.refresh_from_db()
        audit.record(
            actor,
            action or TRANSITION_ACTIONS[target],
            booking=booking,
            before=before,
            after=audit.snapshot(booking),
            reason=reason,
            metadata=metadata,
        )
        uow.add_event(TRANSITION_EVENTS[target](**_event_fields(booking, actor), **(event_extra or {})))

        logger.info(
            "booking.transitioned",
            booking_id=str(booking.pk),
            from_status=current.value,
            to_status=target.value,
            actor=actor,
        )
        return booking

    def _transition(self, booking_id, target: BookingStatus, **kwargs) -> Booking:
        def run():
            with DjangoUnitOfWork() as uow:
                booking = self._get(booking_id)
                return self._apply_transition(uow, booking, target, **kwargs)

        return retry_on_serialization_failure(run)

    def cancel(self, command: CancelBookingCommand) -> Booking:
        """PROVISIONAL|CONFIRMED -> CANCELLED; releases inventory in the same transaction"""
        action = AuditEntry.Action.OVERRIDE_CANCEL if command.admin else AuditEntry.Action.BOOKING_CANCELLED
        return self._transition(
            command.booking_id,
            BookingStatus.CANCELLED,
            actor=command.actor,
            action=action,
            reason=command.reason,
            metadata={'admin': command.admin},
            event_extra={'reason': command.reason},
        )

    def check_in(self, command: CheckInBookingCommand) -> Booking:
        return self._transition(command.booking_id, BookingStatus.CHECKED_IN, actor=command.actor)

    def check_out(self, command: CheckOutBookingCommand) -> Booking:
        return self._transition(command.booking_id, BookingStatus.CHECKED_OUT, actor=command.actor)

    def complete(self, command: CompleteBookingCommand) -> Booking:
        return self._transition(command.booking_id, BookingStatus.COMPLETED, actor=command.actor)

    def force_status(self, command: ForceStatusCommand) -> Booking:
        """
        Administrative move along a legal transition.

        Goes through the same transition code as the regular operations;
        forcing CONFIRMED skips the payment requirement and forcing
        CANCELLED releases inventory.
        """
        try:
            target = BookingStatus(command.target_status)
        except ValueError:
            raise errors.ValidationError(f"Unknown booking status '{command.target_status}'.")

        return self._transition(
            command.booking_id,
            target,
            actor=command.actor,
            action=AuditEntry.Action.OVERRIDE_FORCE_STATUS,
            reason=command.reason,
            metadata={'forced': True, 'target_status': target.value},
            event_extra={'reason': command.reason} if target is BookingStatus.CANCELLED else None,
        )

    # ----- payments -----

    def record_payment(self, command: RecordPaymentCommand) -> PaymentResult:
        """
        Record a processor callback and confirm the booking once the paid
        amount covers the deposit (or the full total without a deposit).
        """
        try:
            status = PAYMENT_OUTCOMES[command.outcome]
        except KeyError:
            raise errors.ValidationError(f"Unknown payment outcome '{command.outcome}'.")
        _validate_positive_int(command.amount, "Payment amount must be a positive integer.")

        return self._record(
            command.booking_id,
            amount=command.amount,
            status=status,
            method=Payment.Method.ONLINE,
            reference=command.provider_reference,
            actor=command.actor,
            metadata=command.metadata,
            admin=False,
        )

    def record_offline_payment(self, command: RecordOfflinePaymentCommand) -> PaymentResult:
        """Admin-recorded payment; same confirmation rule as online payments"""
        _validate_positive_int(command.amount, "Payment amount must be a positive integer.")

        return self._record(
            command.booking_id,
            amount=command.amount,
            status=Payment.Status.SUCCEEDED,
            method=Payment.Method.OFFLINE,
            reference=command.reference,
            actor=command.actor,
            metadata={},
            reason=command.reason,
            admin=True,
        )

    def _record(self, booking_id, *, amount, status, method, reference, actor, metadata, admin, reason='') -> PaymentResult:
        duplicate = finances.find_by_reference(reference)
        if duplicate is not None:
            return self._duplicate_payment(duplicate)

        try:
            return retry_on_serialization_failure(
                self._record_in_transaction,
                booking_id,
                amount=amount,
                status=status,
                method=method,
                reference=reference,
                actor=actor,
                metadata=metadata,
                admin=admin,
                reason=reason,
            )
        except IntegrityError:
            duplicate = finances.find_by_reference(reference)
            if duplicate is None:
                raise
            return self._duplicate_payment(duplicate)

    def _duplicate_payment(self, payment: Payment) -> PaymentResult:
        logger.info("payment.duplicate_callback", provider_reference=payment.provider_reference, payment_id=payment.pk)
        return PaymentResult(booking=self._get(payment.booking_id), payment=payment, duplicate=True)

    def _record_in_transaction(self, booking_id, *, amount, status, method, reference, actor, metadata, admin, reason) -> PaymentResult:
        with DjangoUnitOfWork() as uow:
            # Serializes callbacks for one booking so the paid total sees every earlier payment
            booking = self._get(booking_id, lock=True)
            now = timezone.now()
            payment = Payment.objects.create(
                booking=booking,
                amount=amount,
                status=status,
                method=method,
                provider_reference=reference or None,
                recorded_by=actor,
                metadata=metadata or {},
                paid_at=now if status == Payment.Status.SUCCEEDED else None,
            )

            paid = finances.paid_total(booking.pk)
            payment_metadata = {
                'payment_id': payment.pk,
                'amount': amount,
                'outcome': status,
                'method': method,
                'paid_total': paid,
                'required': booking.amount_due_for_confirmation,
            }

            confirmed = False
            if (
                status == Payment.Status.SUCCEEDED
                and booking.status == BookingStatus.PROVISIONAL.value
                and paid >= booking.amount_due_for_confirmation
            ):
                try:
                    self._apply_transition(
                        uow,
                        booking,
                        BookingStatus.CONFIRMED,
                        actor=actor,
                        action=AuditEntry.Action.OVERRIDE_OFFLINE_PAYMENT if admin else None,
                        reason=reason,
                        metadata=payment_metadata,
                        event_extra={'paid_amount': paid},
                    )
                    confirmed = True
                except errors.InvalidTransition:
                    # Another payment confirmed (or a sweeper cancelled) the
                    # booking first; the money is still recorded.
                    booking.refresh_from_db()

            if admin and not confirmed:
                audit.record(
                    actor,
                    AuditEntry.Action.OVERRIDE_OFFLINE_PAYMENT,
                    booking=booking,
                    before=None,
                    after=audit.snapshot(booking),
                    reason=reason,
                    metadata=payment_metadata,
                )
            if not admin:
                audit.record(
                    actor,
                    AuditEntry.Action.PAYMENT_RECORDED,
                    booking=booking,
                    after={'payment_id': payment.pk, 'status': status, 'amount': amount},
                    metadata={**payment_metadata, 'provider_reference': reference},
                )

        if booking.status in (BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value):
            logger.warning(
                "payment.for_closed_booking",
                booking_id=str(booking.pk),
                status=booking.status,
                payment_id=payment.pk,
            )
        logger.info(
            "payment.recorded",
            booking_id=str(booking.pk),
            payment_id=payment.pk,
            outcome=status,
            amount=amount,
            confirmed=confirmed,
        )
        return PaymentResult(booking=booking, payment=payment, confirmed=confirmed)

    # ----- dispatch -----

    def handle(self, command):
        handler = COMMAND_ROUTES.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported command: {type(command).__name__}")
        return handler(self, command)


COMMAND_ROUTES: Dict[type, Callable] = {
    CreateBookingCommand: BookingLifecycleManager.create,
    RecordPaymentCommand: BookingLifecycleManager.record_payment,
    CancelBookingCommand: BookingLifecycleManager.cancel,
    CheckInBookingCommand: BookingLifecycleManager.check_in,
    CheckOutBookingCommand: BookingLifecycleManager.check_out,
    CompleteBookingCommand: BookingLifecycleManager.complete,
    RecordOfflinePaymentCommand: BookingLifecycleManager.record_offline_payment,
    ForceStatusCommand: BookingLifecycleManager.force_status,
}


def dispatch(command):
    """Message bus entry point: run ``command`` on a fresh lifecycle manager"""
    return BookingLifecycleManager().handle(command)
