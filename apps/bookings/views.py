"""API views for the booking domain.

Every state change is sent through the message bus to the booking
lifecycle manager; views only translate HTTP into commands. Engine errors
are rendered by ``shared.api.exceptions.engine_exception_handler``.
"""

from __future__ import annotations

from rest_framework import mixins, permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.message_bus import message_bus

from .application.command_handlers import (
    CancelBookingCommand,
    CheckInBookingCommand,
    CheckOutBookingCommand,
    CompleteBookingCommand,
    CreateBookingCommand,
    ForceStatusCommand,
    RecordOfflinePaymentCommand,
    RecordPaymentCommand,
)
from .models import Booking
from .permissions import IsBookingGuest, IsPaymentProcessor, is_staff
from .serializers import (
    AdminReasonSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    ForceStatusSerializer,
    OfflinePaymentSerializer,
    PaymentCallbackSerializer,
    PaymentResultSerializer,
    ReasonSerializer,
)


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reservations and their lifecycle transitions."""

    queryset = Booking.objects.select_related("room_type").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingGuest]
    filterset_fields = ["status", "room_type", "guest_id", "guest_classification"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if is_staff(user):
            return qs
        return qs.filter(guest_id=user.get_username())

    def _guest_id(self, requested: str | None) -> str:
        """Guests book for themselves; staff may book on behalf of any guest."""
        user = self.request.user
        if is_staff(user):
            if not requested:
                raise serializers.ValidationError({"guest_id": ["This field is required."]})
            return requested
        if requested and requested != user.get_username():
            raise PermissionDenied("Guests can only book for themselves.")
        return user.get_username()

    def _respond(self, booking: Booking, http_status: int = status.HTTP_200_OK) -> Response:
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data, status=http_status)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        guest_id = self._guest_id(data.get("guest_id"))

        booking = message_bus.handle_command(
            CreateBookingCommand(
                room_type_id=data["room_type"],
                guest_id=guest_id,
                guest_classification=data["guest_classification"],
                start_date=data["start_date"],
                end_date=data["end_date"],
                rooms_booked=data["rooms_booked"],
                idempotency_key=data.get("idempotency_key") or None,
            )
        )
        if booking.guest_id != guest_id:
            # Replayed idempotency key of another guest
            raise PermissionDenied("Idempotency key is already in use.")
        return self._respond(booking, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="payments", permission_classes=[IsPaymentProcessor])
    def payments(self, request, pk=None):  # type: ignore
        """Payment processor callback."""
        serializer = PaymentCallbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = message_bus.handle_command(
            RecordPaymentCommand(
                booking_id=pk,
                amount=data["amount"],
                outcome=data["outcome"],
                provider_reference=data.get("provider_reference") or None,
                actor=request.user.get_username(),
                metadata=data.get("metadata") or {},
            )
        )
        http_status = status.HTTP_200_OK if result.duplicate else status.HTTP_201_CREATED
        return Response(PaymentResultSerializer(result).data, status=http_status)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self.get_object()

        booking = message_bus.handle_command(
            CancelBookingCommand(
                booking_id=booking.pk,
                actor=request.user.get_username(),
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="check-in", permission_classes=[permissions.IsAdminUser])
    def check_in(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(CheckInBookingCommand(booking_id=pk, actor=request.user.get_username()))
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="check-out", permission_classes=[permissions.IsAdminUser])
    def check_out(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(CheckOutBookingCommand(booking_id=pk, actor=request.user.get_username()))
        return self._respond(booking)

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAdminUser])
    def complete(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(CompleteBookingCommand(booking_id=pk, actor=request.user.get_username()))
        return self._respond(booking)

    # ===== Administrative overrides =====

    @action(detail=True, methods=["post"], url_path="offline-payment", permission_classes=[permissions.IsAdminUser])
    def offline_payment(self, request, pk=None):  # type: ignore
        serializer = OfflinePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = message_bus.handle_command(
            RecordOfflinePaymentCommand(
                booking_id=pk,
                amount=data["amount"],
                actor=request.user.get_username(),
                reason=data["reason"],
                reference=data.get("reference") or None,
            )
        )
        http_status = status.HTTP_200_OK if result.duplicate else status.HTTP_201_CREATED
        return Response(PaymentResultSerializer(result).data, status=http_status)

    @action(detail=True, methods=["post"], url_path="force-status", permission_classes=[permissions.IsAdminUser])
    def force_status(self, request, pk=None):  # type: ignore
        serializer = ForceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = message_bus.handle_command(
            ForceStatusCommand(
                booking_id=pk,
                target_status=serializer.validated_data["status"],
                actor=request.user.get_username(),
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="admin-cancel", permission_classes=[permissions.IsAdminUser])
    def admin_cancel(self, request, pk=None):  # type: ignore
        serializer = AdminReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = message_bus.handle_command(
            CancelBookingCommand(
                booking_id=pk,
                actor=request.user.get_username(),
                reason=serializer.validated_data["reason"],
                admin=True,
            )
        )
        return self._respond(booking)
