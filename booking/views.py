# booking/views.py
#
# Purpose:
# - Public APIs: host page, available slots for a date, booking creation.
# - Host APIs (session auth): bookings list/cancel, event types, weekly
#   availability, profile.
# - The authenticated host is read from request.user here and passed explicitly
#   into the services; services never look at the request.
#
# Errors:
# - Services raise booking.services.errors.* (DRF APIExceptions); DRF turns
#   them into {"detail": "..."} with the right status code.
#
from django.shortcuts import get_object_or_404

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, BasePermission
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Booking, EventType, Host
from .serializers import (
    AvailabilityDaySerializer,
    BookingSerializer,
    CancelBookingSerializer,
    EventTypeSerializer,
    HostProfileSerializer,
    PublicHostSerializer,
)
from .services.availability_engine import AvailabilityEngine
from .services.availability_manager import AvailabilityManager
from .services.booking_manager import BookingManager


UUID_RE = "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"


# -------------------- Permissions --------------------
class IsHost(BasePermission):
    """
    Logged-in user with a Host profile.
    """
    message = "Not authenticated as a host."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and hasattr(user, "host"))


def current_host(request) -> Host:
    return request.user.host


# -------------------- Public --------------------
class PublicHostView(APIView):
    """
    GET /api/hosts/<host_slug>/
    Host public page: name, bio and active event types.
    """
    permission_classes = [AllowAny]

    def get(self, request, host_slug):
        host = get_object_or_404(Host, slug=host_slug)
        return Response(PublicHostSerializer(host).data)


class SlotsView(APIView):
    """
    GET /api/hosts/<host_slug>/event-types/<event_slug>/slots/?date=YYYY-MM-DD

    Returns {"slots": [{"time": "09:00", "available": true}, ...]}.
    An empty list means the host doesn't work that weekday; an unknown
    host/event type is a 404.
    """
    permission_classes = [AllowAny]

    def get_engine(self):
        return AvailabilityEngine()

    def get(self, request, host_slug, event_slug):
        date_str = (request.query_params.get("date") or "").strip()
        if not date_str:
            return Response({"detail": "Missing 'date'."}, status=status.HTTP_400_BAD_REQUEST)

        slots = self.get_engine().get_slots(host_slug, event_slug, date_str)
        return Response({"slots": slots})


# -------------------- Bookings --------------------
class BookingViewSet(viewsets.GenericViewSet):
    """
    Endpoints:
    - POST   /api/bookings/                 create (public, no login)
    - GET    /api/bookings/?scope=upcoming  list the host's bookings
    - GET    /api/bookings/{id}/            booking detail (host)
    - POST   /api/bookings/{id}/cancel/     cancel (host)
    """
    serializer_class = BookingSerializer
    lookup_value_regex = UUID_RE

    def get_permissions(self):
        if self.action == "create":
            return [AllowAny()]
        return [IsHost()]

    def get_manager(self):
        return BookingManager()

    def get_queryset(self):
        return Booking.objects.for_host(current_host(self.request)).select_related("event_type")

    def create(self, request, *args, **kwargs):
        booking = self.get_manager().create_booking(request.data)
        return Response({"booking_id": str(booking.id)}, status=status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        scope = (request.query_params.get("scope") or "upcoming").strip()
        qs = self.get_manager().list_bookings(current_host(request), scope)
        return Response(BookingSerializer(qs, many=True).data)

    def retrieve(self, request, pk=None):
        booking = get_object_or_404(self.get_queryset(), pk=pk)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        body = CancelBookingSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        booking = self.get_manager().cancel_booking(
            current_host(request), pk, reason=body.validated_data.get("reason")
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)


# -------------------- Event types --------------------
class EventTypeViewSet(viewsets.ModelViewSet):
    """
    Host's event types. Deleting one also deletes its bookings.
    POST /api/event-types/{id}/toggle/ flips is_active.
    """
    serializer_class = EventTypeSerializer
    permission_classes = [IsHost]
    lookup_value_regex = UUID_RE

    def get_queryset(self):
        return EventType.objects.filter(host=current_host(self.request)).order_by("-created_at")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.user.is_authenticated and hasattr(self.request.user, "host"):
            context["host"] = current_host(self.request)
        return context

    def perform_create(self, serializer):
        serializer.save(host=current_host(self.request))

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        event_type = self.get_object()
        event_type.is_active = not event_type.is_active
        event_type.save(update_fields=["is_active", "updated_at"])
        return Response({"id": str(event_type.id), "is_active": event_type.is_active})


# -------------------- Availability --------------------
class AvailabilityView(APIView):
    """
    GET /api/availability/   the host's weekly template
    PUT /api/availability/   replace it with a list of weekdays
    """
    permission_classes = [IsHost]
    manager = AvailabilityManager()

    def get(self, request):
        rows = self.manager.get_weekly_template(current_host(request))
        return Response(AvailabilityDaySerializer(rows, many=True).data)

    def put(self, request):
        rows = self.manager.save_weekly_template(current_host(request), request.data)
        return Response(AvailabilityDaySerializer(rows, many=True).data)


# -------------------- Profile --------------------
class HostProfileView(mixins.RetrieveModelMixin, mixins.UpdateModelMixin, viewsets.GenericViewSet):
    """
    GET/PATCH /api/me/
    """
    serializer_class = HostProfileSerializer
    permission_classes = [IsHost]

    def get_object(self):
        return current_host(self.request)

    @action(detail=False, methods=["get"], url_path="slug-available")
    def slug_available(self, request):
        slug = (request.query_params.get("slug") or "").strip()
        taken = Host.objects.filter(slug=slug).exclude(pk=current_host(request).pk).exists()
        return Response({"available": bool(slug) and not taken})
