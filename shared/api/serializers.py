"""Serializers shared by the engine's read-only preview endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import DateRange


class StayQuerySerializer(serializers.Serializer):
    """Room type plus a half-open ``[start_date, end_date)`` stay."""

    room_type = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def date_range(self) -> DateRange:
        # DateRange raises the engine's ValidationError for an empty stay
        return DateRange(self.validated_data["start_date"], self.validated_data["end_date"])
