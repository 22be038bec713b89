"""Serializers for the inventory domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.api.serializers import StayQuerySerializer

from .models import InventoryDay, RoomType


class RoomTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = RoomType
        fields = ["id", "name", "description", "base_rate", "total_rooms"]
        read_only_fields = fields


class InventoryDaySerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryDay
        fields = ["room_type", "date", "available_rooms"]
        read_only_fields = fields


class AvailabilityQuerySerializer(StayQuerySerializer):
    pass


class BulkEditSerializer(StayQuerySerializer):
    """Administrative override of the rooms left for a range of nights."""

    available_rooms = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=500)
