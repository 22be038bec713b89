"""API views for the inventory domain.

Availability is a read-only preview; it is never used as the basis of a
reservation. The bulk edit endpoint is restricted to administrators and
is recorded in the audit log.
"""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .ledger import InventoryLedger
from .models import RoomType
from .serializers import AvailabilityQuerySerializer, BulkEditSerializer, RoomTypeSerializer


class InventoryViewSet(viewsets.ReadOnlyModelViewSet):
    """Room types and their per-night availability."""

    queryset = RoomType.objects.all()
    serializer_class = RoomTypeSerializer
    permission_classes = [permissions.AllowAny]

    @action(detail=False, methods=["get"], url_path="availability")
    def availability(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        nights = InventoryLedger().availability(query.validated_data["room_type"], query.date_range())
        return Response(
            {
                "room_type": query.validated_data["room_type"],
                "nights": [
                    {"date": night.isoformat(), "available_rooms": available}
                    for night, available in nights.items()
                ],
            }
        )

    @action(
        detail=False,
        methods=["post"],
        url_path="bulk-edit",
        permission_classes=[permissions.IsAdminUser],
    )
    def bulk_edit(self, request):  # type: ignore
        serializer = BulkEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        entry = InventoryLedger().set_available(
            data["room_type"],
            serializer.date_range(),
            data["available_rooms"],
            actor=request.user.get_username(),
            reason=data["reason"],
        )
        return Response(
            {
                "room_type": data["room_type"],
                "start_date": data["start_date"].isoformat(),
                "end_date": data["end_date"].isoformat(),
                "available_rooms": data["available_rooms"],
                "audit_entry": entry.pk,
            },
            status=status.HTTP_200_OK,
        )
