"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.audit.models import AuditEntry
from apps.bookings.models import Booking, GuestBookingRule
from apps.inventory.models import InventoryDay, RoomType
from apps.rates.models import CalendarOverride


class BookingAPITests(APITestCase):
    """Covers creation, payment callbacks, cancellation and admin overrides."""

    def setUp(self) -> None:
        User = get_user_model()
        self.room_type = RoomType.objects.create(name="Deluxe", base_rate=15000, total_rooms=20)
        GuestBookingRule.objects.create(classification="standard", max_days_advance=90, min_days_notice=3)
        self.start = timezone.localdate() + timedelta(days=10)
        self.admin = User.objects.create_superuser("admin", "admin@example.com", "AdminPass123")
        self.guest = User.objects.create_user("guest-42", "guest@example.com", "GuestPass123")
        self.other_guest = User.objects.create_user("guest-99", "other@example.com", "GuestPass123")
        self.processor = User.objects.create_user("payments-gateway", "psp@example.com", "GatewayPass123")
        self.processor.user_permissions.add(
            Permission.objects.get(codename="add_payment", content_type__app_label="finances")
        )
        self.client.force_authenticate(self.guest)
        self.list_url = reverse("booking-list")

    def _payload(self, nights: int = 2, **overrides) -> dict:
        payload = {
            "room_type": self.room_type.pk,
            "guest_classification": "standard",
            "start_date": self.start.isoformat(),
            "end_date": (self.start + timedelta(days=nights)).isoformat(),
            "rooms_booked": 1,
        }
        payload.update(overrides)
        return payload

    def _create(self, **overrides) -> dict:
        response = self.client.post(self.list_url, self._payload(**overrides), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def _pay(self, booking_id: str, **overrides):
        callback = {"amount": 30000, "outcome": "succeeded", "provider_reference": "pi_123"}
        callback.update(overrides)
        return self.client.post(reverse("booking-payments", args=[booking_id]), callback, format="json")

    def test_guest_can_create_booking(self) -> None:
        data = self._create()

        self.assertEqual(data["status"], "PROVISIONAL")
        self.assertEqual(data["guest_id"], "guest-42")
        self.assertEqual(data["total_price"], 30000)
        self.assertEqual(data["amount_due_for_confirmation"], 30000)
        self.assertEqual(data["room_type_name"], "Deluxe")
        self.assertEqual(
            InventoryDay.objects.get(room_type=self.room_type, date=self.start).available_rooms,
            19,
        )

    def test_anonymous_cannot_create_booking(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertFalse(InventoryDay.objects.exists())

    def test_guest_cannot_book_for_someone_else(self) -> None:
        response = self.client.post(self.list_url, self._payload(guest_id="guest-99"), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Booking.objects.exists())

    def test_staff_books_on_behalf_of_a_guest(self) -> None:
        self.client.force_authenticate(self.admin)

        missing = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)

        data = self._create(guest_id="guest-99")
        self.assertEqual(data["guest_id"], "guest-99")

    def test_idempotent_create(self) -> None:
        first = self._create(idempotency_key="req-1")
        second = self._create(idempotency_key="req-1")

        self.assertEqual(first["id"], second["id"])
        self.assertEqual(Booking.objects.count(), 1)

    def test_idempotency_key_of_another_guest_is_not_replayed(self) -> None:
        self._create(idempotency_key="req-1")
        self.client.force_authenticate(self.other_guest)

        response = self.client.post(self.list_url, self._payload(idempotency_key="req-1"), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertNotIn("id", response.data)

    def test_rule_violation(self) -> None:
        payload = self._payload(start_date=(timezone.localdate() + timedelta(days=1)).isoformat())

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data["error"], "rule_violation")
        self.assertTrue(response.data["detail"].startswith("Insufficient notice"))

    def test_blocked_date_is_rejected(self) -> None:
        CalendarOverride.objects.create(date=self.start, rule_kind="BLOCKED")

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data["error"], "pricing_rejected")
        self.assertEqual(response.data["date"], self.start.isoformat())

    def test_sold_out_returns_conflict(self) -> None:
        InventoryDay.objects.create(
            room_type=self.room_type,
            date=self.start + timedelta(days=1),
            available_rooms=0,
        )

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "insufficient_inventory")
        self.assertEqual(response.data["date"], (self.start + timedelta(days=1)).isoformat())
        self.assertFalse(Booking.objects.exists())

    def test_invalid_payload(self) -> None:
        response = self.client.post(self.list_url, self._payload(rooms_booked=0), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payment_callback_confirms_booking(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.processor)

        response = self._pay(booking["id"])

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["confirmed"])
        self.assertEqual(response.data["booking"]["status"], "CONFIRMED")
        self.assertEqual(response.data["payment"]["recorded_by"], "payments-gateway")

        replay = self._pay(booking["id"])
        self.assertEqual(replay.status_code, status.HTTP_200_OK)
        self.assertTrue(replay.data["duplicate"])

    def test_payment_callback_requires_the_processor(self) -> None:
        booking = self._create()

        as_guest = self._pay(booking["id"])
        self.client.force_authenticate(None)
        as_anonymous = self._pay(booking["id"])

        self.assertEqual(as_guest.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn(as_anonymous.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertEqual(Booking.objects.get(pk=booking["id"]).status, "PROVISIONAL")

    def test_guest_can_cancel_booking(self) -> None:
        booking = self._create()
        url = reverse("booking-cancel", args=[booking["id"]])

        response = self.client.post(url, {"reason": "Plans changed"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "CANCELLED")
        self.assertEqual(
            InventoryDay.objects.get(room_type=self.room_type, date=self.start).available_rooms,
            20,
        )
        entry = AuditEntry.objects.get(booking_id=booking["id"], action=AuditEntry.Action.BOOKING_CANCELLED)
        self.assertEqual(entry.actor, "guest-42")

        again = self.client.post(url, {}, format="json")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["error"], "invalid_transition")

    def test_only_the_guest_can_cancel(self) -> None:
        booking = self._create()
        url = reverse("booking-cancel", args=[booking["id"]])

        self.client.force_authenticate(self.other_guest)
        by_other_guest = self.client.post(url, {}, format="json")
        self.client.force_authenticate(None)
        by_anonymous = self.client.post(url, {}, format="json")

        self.assertEqual(by_other_guest.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn(by_anonymous.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertEqual(Booking.objects.get(pk=booking["id"]).status, "PROVISIONAL")
        self.assertEqual(
            InventoryDay.objects.get(room_type=self.room_type, date=self.start).available_rooms,
            19,
        )

    def test_stay_transitions_require_staff(self) -> None:
        booking = self._create()

        response = self.client.post(reverse("booking-check-in", args=[booking["id"]]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_overrides(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.admin)

        forced = self.client.post(
            reverse("booking-force-status", args=[booking["id"]]),
            {"status": "CONFIRMED", "reason": "Voucher from partner agency"},
            format="json",
        )
        self.assertEqual(forced.status_code, status.HTTP_200_OK, forced.data)
        self.assertEqual(forced.data["status"], "CONFIRMED")

        checked_in = self.client.post(reverse("booking-check-in", args=[booking["id"]]))
        self.assertEqual(checked_in.data["status"], "CHECKED_IN")

        illegal = self.client.post(
            reverse("booking-admin-cancel", args=[booking["id"]]),
            {"reason": "Guest asked"},
            format="json",
        )
        self.assertEqual(illegal.status_code, status.HTTP_409_CONFLICT)

        entry = AuditEntry.objects.get(booking_id=booking["id"], action=AuditEntry.Action.OVERRIDE_FORCE_STATUS)
        self.assertEqual(entry.actor, "admin")
        self.assertEqual(entry.reason, "Voucher from partner agency")

    def test_admin_cancel_requires_reason(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("booking-admin-cancel", args=[booking["id"]]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_offline_payment(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("booking-offline-payment", args=[booking["id"]]),
            {"amount": 30000, "reason": "Cash at reception"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["payment"]["method"], "OFFLINE")
        self.assertEqual(response.data["booking"]["status"], "CONFIRMED")

    def test_list_is_scoped_to_the_guest(self) -> None:
        own = self._create()
        self.client.force_authenticate(self.other_guest)
        self._create()

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn(own["id"], [row["id"] for row in response.data])

        hidden = self.client.get(reverse("booking-detail", args=[own["id"]]))
        self.assertEqual(hidden.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(self.admin)
        self.assertEqual(len(self.client.get(self.list_url).data), 2)

    def test_list_filters_by_status(self) -> None:
        self._create(start_date=(self.start + timedelta(days=5)).isoformat(), end_date=(self.start + timedelta(days=6)).isoformat())
        cancelled = self._create()
        self.client.post(reverse("booking-cancel", args=[cancelled["id"]]), {}, format="json")

        response = self.client.get(self.list_url, {"status": "CANCELLED"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data], [cancelled["id"]])

    def test_unknown_booking(self) -> None:
        response = self.client.get(reverse("booking-detail", args=["00000000-0000-0000-0000-000000000000"]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
