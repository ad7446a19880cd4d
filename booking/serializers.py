import re
import zoneinfo

from rest_framework import serializers

from .models import Availability, Booking, EventType, Host
from .services.errors import InvalidInput
from .services.slot_utils import parse_day

HHMM_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
SLUG_RE = re.compile(r"^[a-z0-9-]+$")


def validate_timezone_name(value):
    if value not in zoneinfo.available_timezones():
        raise serializers.ValidationError("Unknown timezone.")
    return value


class BookingRequestSerializer(serializers.Serializer):
    """
    Guest booking form. Field order is the order errors are reported in.
    """
    event_type_id = serializers.UUIDField(error_messages={"invalid": "Event type not found."})
    guest_name = serializers.CharField(
        min_length=2,
        max_length=200,
        error_messages={"min_length": "Name must be at least 2 characters."},
    )
    guest_email = serializers.EmailField(error_messages={"invalid": "Invalid email."})
    guest_timezone = serializers.CharField(min_length=1, max_length=64)
    guest_notes = serializers.CharField(
        max_length=500,
        required=False,
        allow_blank=True,
        allow_null=True,
        error_messages={"max_length": "Notes can't be longer than 500 characters."},
    )
    date = serializers.RegexField(
        r"^\d{4}-\d{2}-\d{2}$", error_messages={"invalid": "Invalid date format. Use YYYY-MM-DD."}
    )
    time = serializers.RegexField(
        HHMM_RE, error_messages={"invalid": "Invalid time format. Use HH:MM (24h)."}
    )

    def validate_date(self, value):
        # Matches the regex but may not exist, e.g. 2026-02-30.
        try:
            parse_day(value)
        except InvalidInput as exc:
            raise serializers.ValidationError(exc.detail)
        return value

    def validate_time(self, value):
        # "9:30" -> "09:30"
        h, m = value.split(":")
        return f"{int(h):02d}:{m}"


class BookingSerializer(serializers.ModelSerializer):
    event_type_title = serializers.CharField(source="event_type.title", read_only=True)
    duration = serializers.IntegerField(source="event_type.duration", read_only=True)
    color = serializers.CharField(source="event_type.color", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "event_type",
            "event_type_title",
            "duration",
            "color",
            "guest_name",
            "guest_email",
            "guest_timezone",
            "guest_notes",
            "start_time",
            "end_time",
            "status",
            "cancel_reason",
            "cancelled_at",
            "external_event_id",
            "created_at",
        ]
        read_only_fields = fields


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)


class EventTypeSerializer(serializers.ModelSerializer):
    """
    Host-side event type editor. Expects the owning host in context["host"].
    """
    title = serializers.CharField(
        min_length=2,
        max_length=200,
        error_messages={"min_length": "Title must be at least 2 characters."},
    )
    slug = serializers.RegexField(
        SLUG_RE,
        min_length=2,
        max_length=30,
        error_messages={
            "invalid": "Only lowercase letters, numbers and hyphens.",
            "min_length": "Slug must be at least 2 characters.",
            "max_length": "Slug can't be longer than 30 characters.",
        },
    )
    duration = serializers.IntegerField(
        min_value=5,
        max_value=480,
        error_messages={"min_value": "Minimum 5 minutes.", "max_value": "Maximum 8 hours."},
    )
    buffer_before = serializers.IntegerField(min_value=0, max_value=60, required=False)
    buffer_after = serializers.IntegerField(min_value=0, max_value=60, required=False)
    color = serializers.RegexField(
        r"^#[0-9A-Fa-f]{6}$", required=False, error_messages={"invalid": "Invalid color."}
    )

    class Meta:
        model = EventType
        fields = [
            "id",
            "title",
            "slug",
            "description",
            "duration",
            "buffer_before",
            "buffer_after",
            "is_active",
            "color",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "is_active", "created_at", "updated_at"]

    def validate_slug(self, value):
        host = self.context["host"]
        qs = EventType.objects.filter(host=host, slug=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("You already have an event type with this slug.")
        return value


class PublicEventTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = EventType
        fields = ["id", "title", "slug", "description", "duration", "color"]


class AvailabilityDaySerializer(serializers.ModelSerializer):
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)
    start_time = serializers.RegexField(HHMM_RE, error_messages={"invalid": "Use HH:MM (24h)."})
    end_time = serializers.RegexField(HHMM_RE, error_messages={"invalid": "Use HH:MM (24h)."})

    class Meta:
        model = Availability
        fields = ["day_of_week", "start_time", "end_time", "is_enabled"]

    def _pad(self, value):
        h, m = value.split(":")
        return f"{int(h):02d}:{m}"

    def validate_start_time(self, value):
        return self._pad(value)

    def validate_end_time(self, value):
        return self._pad(value)


class HostProfileSerializer(serializers.ModelSerializer):
    name = serializers.CharField(
        min_length=2,
        max_length=200,
        error_messages={"min_length": "Name must be at least 2 characters."},
    )
    slug = serializers.RegexField(
        SLUG_RE,
        min_length=3,
        max_length=30,
        error_messages={
            "invalid": "Only lowercase letters, numbers and hyphens.",
            "min_length": "Slug must be at least 3 characters.",
            "max_length": "Slug can't be longer than 30 characters.",
        },
    )
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True)
    timezone = serializers.CharField(validators=[validate_timezone_name])

    class Meta:
        model = Host
        fields = ["id", "name", "email", "slug", "bio", "timezone"]
        read_only_fields = ["id", "email"]

    def validate_slug(self, value):
        qs = Host.objects.filter(slug=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("This slug is already taken. Pick another one.")
        return value


class PublicHostSerializer(serializers.ModelSerializer):
    event_types = serializers.SerializerMethodField()

    class Meta:
        model = Host
        fields = ["name", "slug", "bio", "timezone", "event_types"]

    def get_event_types(self, host):
        qs = host.event_types.filter(is_active=True).order_by("created_at")
        return PublicEventTypeSerializer(qs, many=True).data
