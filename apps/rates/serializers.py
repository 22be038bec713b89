"""Serializers for the rates domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.api.serializers import StayQuerySerializer


class QuoteQuerySerializer(StayQuerySerializer):
    rooms = serializers.IntegerField(min_value=1, default=1)
