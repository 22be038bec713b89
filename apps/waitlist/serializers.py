"""Serializers for the waitlist."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import DateRange

from .models import WaitlistEntry


class WaitlistJoinSerializer(serializers.Serializer):
    """Waitlist request. Guest id defaults to the caller."""

    room_type = serializers.IntegerField(min_value=1)
    guest_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    rooms_requested = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")

    def date_range(self) -> DateRange:
        return DateRange(self.validated_data["start_date"], self.validated_data["end_date"])


class WaitlistEntrySerializer(serializers.ModelSerializer):
    room_type_name = serializers.ReadOnlyField(source="room_type.name")

    class Meta:
        model = WaitlistEntry
        fields = [
            "id",
            "room_type",
            "room_type_name",
            "guest_id",
            "start_date",
            "end_date",
            "rooms_requested",
            "status",
            "notes",
            "notified_at",
            "expires_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class NotifySerializer(serializers.Serializer):
    expires_in_hours = serializers.IntegerField(min_value=1, max_value=168, required=False)
