"""API views for the rates domain.

The quote endpoint is a read-only price preview. It reserves nothing, and
booking creation prices the stay again inside its own transaction.
"""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .pricing import PricingEngine
from .serializers import QuoteQuerySerializer


class RatesViewSet(viewsets.ViewSet):
    permission_classes = [permissions.AllowAny]

    @action(detail=False, methods=["get"], url_path="quote")
    def quote(self, request):  # type: ignore
        query = QuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        breakdown = PricingEngine().price(
            query.validated_data["room_type"],
            query.date_range(),
            query.validated_data["rooms"],
        )
        return Response(breakdown.to_dict())
