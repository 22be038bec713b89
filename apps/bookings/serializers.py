"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.finances.serializers import PaymentSerializer

from .domain.entities import BookingStatus
from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Reservation request. Guest id defaults to the caller; classification is trusted as given."""

    room_type = serializers.IntegerField(min_value=1)
    guest_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    guest_classification = serializers.SlugField(max_length=50)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    rooms_booked = serializers.IntegerField(min_value=1, default=1)
    idempotency_key = serializers.CharField(max_length=100, required=False, allow_blank=True)


class BookingSerializer(serializers.ModelSerializer):
    """Booking as stored, including the priced breakdown."""

    room_type_name = serializers.ReadOnlyField(source="room_type.name")
    amount_due_for_confirmation = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "room_type",
            "room_type_name",
            "guest_id",
            "guest_classification",
            "start_date",
            "end_date",
            "rooms_booked",
            "total_price",
            "deposit_required",
            "amount_due_for_confirmation",
            "price_breakdown",
            "status",
            "idempotency_key",
            "cancellation_reason",
            "created_at",
            "updated_at",
            "confirmed_at",
            "checked_in_at",
            "checked_out_at",
            "completed_at",
            "cancelled_at",
        ]
        read_only_fields = fields


class PaymentCallbackSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1)
    outcome = serializers.ChoiceField(choices=["succeeded", "failed"])
    provider_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    metadata = serializers.DictField(required=False)


class OfflinePaymentSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class AdminReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class ForceStatusSerializer(AdminReasonSerializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices())


class PaymentResultSerializer(serializers.Serializer):
    booking = BookingSerializer()
    payment = PaymentSerializer()
    confirmed = serializers.BooleanField()
    duplicate = serializers.BooleanField()
