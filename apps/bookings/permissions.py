"""Access rules for the booking API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore

PAYMENT_PERMISSION = "finances.add_payment"


def is_staff(user) -> bool:
    return getattr(user, "is_staff", False) or getattr(user, "is_superuser", False)


class IsBookingGuest(permissions.BasePermission):
    """Owner of a booking or waitlist entry (guest id matched by username) and staff."""

    def has_object_permission(self, request, view, obj):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_staff(user):
            return True
        return obj.guest_id == user.get_username()


class IsPaymentProcessor(permissions.BasePermission):
    """
    Service principal of the payment processor.

    Granted through the ``finances.add_payment`` model permission; staff
    accounts pass as well.
    """

    def has_permission(self, request, view):  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return is_staff(user) or user.has_perm(PAYMENT_PERMISSION)
