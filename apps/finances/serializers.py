"""Serializers for the finance domain (payments)."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "status",
            "method",
            "amount",
            "provider_reference",
            "recorded_by",
            "metadata",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields
