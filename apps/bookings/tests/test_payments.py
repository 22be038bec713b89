"""Tests for payment recording and payment-driven confirmation."""

from __future__ import annotations

import pytest

from apps.audit.models import AuditEntry
from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    RecordOfflinePaymentCommand,
    RecordPaymentCommand,
)
from apps.finances.models import Payment
from shared.domain import errors

pytestmark = pytest.mark.django_db


def _pay(manager, booking, amount, outcome="succeeded", reference=None):
    return manager.record_payment(
        RecordPaymentCommand(booking_id=booking.pk, amount=amount, outcome=outcome, provider_reference=reference)
    )


def _actions(booking) -> list[str]:
    return list(AuditEntry.objects.filter(booking=booking).values_list("action", flat=True))


def test_full_payment_confirms_booking_without_deposit(make_booking, manager):
    booking = make_booking()

    result = _pay(manager, booking, 30000, reference="pi_1")

    assert result.confirmed is True
    assert result.duplicate is False
    assert result.booking.status == "CONFIRMED"
    assert result.booking.confirmed_at is not None
    assert result.payment.provider_reference == "pi_1"
    assert _actions(booking) == [
        AuditEntry.Action.BOOKING_CREATED,
        AuditEntry.Action.BOOKING_CONFIRMED,
        AuditEntry.Action.PAYMENT_RECORDED,
    ]


def test_partial_payments_accumulate(make_booking, manager):
    booking = make_booking()

    first = _pay(manager, booking, 10000, reference="pi_1")
    assert first.confirmed is False
    assert first.booking.status == "PROVISIONAL"

    second = _pay(manager, booking, 20000, reference="pi_2")
    assert second.confirmed is True
    assert Payment.objects.filter(booking_id=booking.pk).count() == 2


def test_group_booking_confirms_on_deposit(make_booking, manager, standard_bands):
    booking = make_booking(rooms=3)

    short = _pay(manager, booking, 8999, reference="pi_1")
    assert short.confirmed is False

    result = _pay(manager, booking, 1, reference="pi_2")
    assert result.confirmed is True
    assert result.booking.status == "CONFIRMED"


def test_failed_payment_is_recorded_but_does_not_count(make_booking, manager):
    booking = make_booking()

    result = _pay(manager, booking, 30000, outcome="failed", reference="pi_1")

    assert result.confirmed is False
    assert result.payment.status == Payment.Status.FAILED
    assert result.payment.paid_at is None
    assert result.booking.status == "PROVISIONAL"


def test_duplicate_callback_is_ignored(make_booking, manager):
    booking = make_booking()
    first = _pay(manager, booking, 10000, reference="pi_1")

    again = _pay(manager, booking, 10000, reference="pi_1")

    assert again.duplicate is True
    assert again.payment.pk == first.payment.pk
    assert Payment.objects.count() == 1
    assert _actions(booking).count(AuditEntry.Action.PAYMENT_RECORDED) == 1


def test_second_payment_after_confirmation_does_not_transition_again(make_booking, manager):
    booking = make_booking()
    _pay(manager, booking, 30000, reference="pi_1")

    result = _pay(manager, booking, 500, reference="pi_2")

    assert result.confirmed is False
    assert result.booking.status == "CONFIRMED"
    assert _actions(booking).count(AuditEntry.Action.BOOKING_CONFIRMED) == 1


def test_payment_for_cancelled_booking_keeps_it_cancelled(make_booking, manager):
    booking = make_booking()
    manager.cancel(CancelBookingCommand(booking_id=booking.pk, actor="guest-42"))

    result = _pay(manager, booking, 30000, reference="pi_late")

    assert result.confirmed is False
    assert result.booking.status == "CANCELLED"
    assert Payment.objects.filter(provider_reference="pi_late").exists()


@pytest.mark.parametrize("amount, outcome", [(0, "succeeded"), (-5, "succeeded"), (100, "pending")])
def test_malformed_callbacks_are_rejected(make_booking, manager, amount, outcome):
    booking = make_booking()

    with pytest.raises(errors.ValidationError):
        _pay(manager, booking, amount, outcome=outcome)
    assert not Payment.objects.exists()


class TestOfflinePayment:
    def test_confirms_with_a_single_override_entry(self, make_booking, manager):
        booking = make_booking()

        result = manager.record_offline_payment(
            RecordOfflinePaymentCommand(booking_id=booking.pk, amount=30000, actor="admin", reason="Cash at desk")
        )

        assert result.confirmed is True
        assert result.payment.method == Payment.Method.OFFLINE
        assert result.payment.recorded_by == "admin"
        assert _actions(booking) == [AuditEntry.Action.BOOKING_CREATED, AuditEntry.Action.OVERRIDE_OFFLINE_PAYMENT]
        entry = AuditEntry.objects.get(booking=booking, action=AuditEntry.Action.OVERRIDE_OFFLINE_PAYMENT)
        assert entry.reason == "Cash at desk"
        assert entry.after["status"] == "CONFIRMED"

    def test_partial_offline_payment_still_writes_one_entry(self, make_booking, manager):
        booking = make_booking()

        result = manager.record_offline_payment(
            RecordOfflinePaymentCommand(booking_id=booking.pk, amount=5000, actor="admin", reason="Bank transfer")
        )

        assert result.confirmed is False
        assert result.booking.status == "PROVISIONAL"
        assert _actions(booking) == [AuditEntry.Action.BOOKING_CREATED, AuditEntry.Action.OVERRIDE_OFFLINE_PAYMENT]

    def test_unknown_booking(self, manager, db):
        with pytest.raises(errors.NotFound):
            manager.record_offline_payment(
                RecordOfflinePaymentCommand(booking_id="00000000-0000-0000-0000-000000000000", amount=1, actor="admin")
            )
