"""API views for the waitlist.

Guests see and manage their own entries; staff see every entry and may
notify a waiting guest by hand. Engine errors are rendered by
``shared.api.exceptions.engine_exception_handler``.
"""

from __future__ import annotations

from rest_framework import mixins, permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.permissions import IsBookingGuest, is_staff

from . import services
from .models import WaitlistEntry
from .serializers import NotifySerializer, WaitlistEntrySerializer, WaitlistJoinSerializer


class WaitlistViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Waitlist entries for sold-out stays."""

    queryset = WaitlistEntry.objects.select_related("room_type").all()
    serializer_class = WaitlistEntrySerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingGuest]
    filterset_fields = ["status", "room_type", "guest_id"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return WaitlistJoinSerializer
        return WaitlistEntrySerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if is_staff(user):
            return qs
        return qs.filter(guest_id=user.get_username())

    def _respond(self, entry: WaitlistEntry, http_status: int = status.HTTP_200_OK) -> Response:
        return Response(WaitlistEntrySerializer(entry, context=self.get_serializer_context()).data, status=http_status)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = request.user
        guest_id = data.get("guest_id") or None
        if is_staff(user):
            if not guest_id:
                raise serializers.ValidationError({"guest_id": ["This field is required."]})
        elif guest_id and guest_id != user.get_username():
            raise PermissionDenied("Guests can only join the waitlist for themselves.")

        entry = services.join(
            guest_id or user.get_username(),
            data["room_type"],
            serializer.date_range(),
            rooms_requested=data["rooms_requested"],
            notes=data["notes"],
        )
        return self._respond(entry, status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):  # type: ignore
        entry = self.get_object()
        return Response({"entry": entry.pk, "available": services.check_availability(entry)})

    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):  # type: ignore
        entry = services.leave(self.get_object().pk)
        return self._respond(entry)

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAdminUser])
    def notify(self, request, pk=None):  # type: ignore
        serializer = NotifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = services.notify(pk, expires_in_hours=serializer.validated_data.get("expires_in_hours"))
        return self._respond(entry)
