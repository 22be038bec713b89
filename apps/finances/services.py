"""Payment queries used by the booking lifecycle."""

from __future__ import annotations

from django.db.models import Sum  # type: ignore

from .models import Payment


def paid_total(booking_id) -> int:
    """Sum of succeeded payments for a booking."""

    total = Payment.objects.filter(
        booking_id=booking_id,
        status=Payment.Status.SUCCEEDED,
    ).aggregate(total=Sum("amount"))["total"]
    return total or 0


def find_by_reference(provider_reference: str | None) -> Payment | None:
    if not provider_reference:
        return None
    return Payment.objects.filter(provider_reference=provider_reference).first()
