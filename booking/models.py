# booking/models.py
#
# Purpose:
# - Core domain models for the scheduling system.
#
# Design highlights:
# - Host: the calendar owner, linked one-to-one to an auth User. Public pages
#   address a host by its unique slug; all local times use host.timezone.
# - EventType: bookable meeting template (title, slug, duration) owned by a host.
#   • slug is unique per host (DB constraint + serializer message)
#   • buffer_before/buffer_after are stored but not applied to slot math
# - Availability: weekly template, one row per weekday (0=Sunday..6=Saturday)
#   with a single HH:MM window. Saved wholesale (delete-all then recreate).
# - Booking:
#   • start_time/end_time are absolute (aware) datetimes
#   • status is uppercase "CONFIRMED" or "CANCELLED"; cancelling never deletes
#   • external_event_id links the mirrored Google Calendar event, if any
# - CalendarCredential: OAuth tokens for the host's Google calendar.
#
# Notes for developers:
# - Double-booking prevention lives in BookingManager, which locks the Host row
#   (select_for_update) around the overlap check + insert. On PostgreSQL you can
#   additionally add an ExclusionConstraint over (host, tstzrange) - it's not
#   included here to keep SQLite working for local development.
#

import uuid
from zoneinfo import ZoneInfo

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models

SLUG_VALIDATOR = RegexValidator(
    r"^[a-z0-9-]+$", "Only lowercase letters, numbers and hyphens."
)
HHMM_VALIDATOR = RegexValidator(r"^([01][0-9]|2[0-3]):[0-5][0-9]$", "Use HH:MM (24h).")
COLOR_VALIDATOR = RegexValidator(r"^#[0-9A-Fa-f]{6}$", "Invalid color.")


# -------------------------
# Host (calendar owner)
# -------------------------
class Host(models.Model):
    """
    A calendar owner who publishes event types and weekly availability.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="host",
    )
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    slug = models.CharField(max_length=30, unique=True, validators=[SLUG_VALIDATOR])
    bio = models.TextField(blank=True, max_length=500)
    timezone = models.CharField(max_length=64, default="UTC")

    def __str__(self):
        return f"{self.name} (@{self.slug})"

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


# -------------------------
# Event type
# -------------------------
class EventType(models.Model):
    """
    A bookable meeting template.

    Rules:
    - duration is 5..480 minutes
    - buffers are 0..60 minutes (kept for a future extension, not enforced)
    - is_active controls visibility and bookability
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name="event_types")
    title = models.CharField(max_length=200)
    slug = models.CharField(max_length=30, validators=[SLUG_VALIDATOR])
    description = models.TextField(blank=True, max_length=500)
    duration = models.PositiveIntegerField(
        validators=[MinValueValidator(5), MaxValueValidator(480)],
        help_text="Length in minutes.",
    )
    buffer_before = models.PositiveIntegerField(default=0, validators=[MaxValueValidator(60)])
    buffer_after = models.PositiveIntegerField(default=0, validators=[MaxValueValidator(60)])
    is_active = models.BooleanField(default=True)
    color = models.CharField(max_length=7, default="#3b82f6", validators=[COLOR_VALIDATOR])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["host", "slug"], name="uniq_eventtype_host_slug"),
        ]

    def __str__(self):
        return f"{self.title} ({self.duration} min)"


# -------------------------
# Weekly availability template
# -------------------------
class Availability(models.Model):
    """
    One enabled/disabled window per host and weekday.
    day_of_week follows 0=Sunday..6=Saturday. Times are zero-padded "HH:MM",
    so string comparison orders them correctly.
    """
    class Weekday(models.IntegerChoices):
        SUNDAY = 0, "Sunday"
        MONDAY = 1, "Monday"
        TUESDAY = 2, "Tuesday"
        WEDNESDAY = 3, "Wednesday"
        THURSDAY = 4, "Thursday"
        FRIDAY = 5, "Friday"
        SATURDAY = 6, "Saturday"

    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name="availability")
    day_of_week = models.PositiveSmallIntegerField(choices=Weekday.choices)
    start_time = models.CharField(max_length=5, validators=[HHMM_VALIDATOR])
    end_time = models.CharField(max_length=5, validators=[HHMM_VALIDATOR])
    is_enabled = models.BooleanField(default=True)

    class Meta:
        ordering = ["host_id", "day_of_week"]
        verbose_name_plural = "availability"
        constraints = [
            models.UniqueConstraint(fields=["host", "day_of_week"], name="uniq_availability_host_day"),
        ]

    def __str__(self):
        state = "" if self.is_enabled else " (off)"
        return f"{self.get_day_of_week_display()}: {self.start_time}-{self.end_time}{state}"


# -------------------------
# Booking record
# -------------------------
class BookingQuerySet(models.QuerySet):
    def active(self):
        return self.exclude(status=Booking.Status.CANCELLED)

    def for_host(self, host):
        return self.filter(event_type__host=host)

    def overlapping(self, start, end):
        """
        Bookings whose [start_time, end_time) overlaps [start, end):
        starts inside, ends inside, or fully covers the requested interval.
        """
        return self.filter(
            models.Q(start_time__lte=start, end_time__gt=start)
            | models.Q(start_time__lt=end, end_time__gte=end)
            | models.Q(start_time__gte=start, end_time__lte=end)
        )


class Booking(models.Model):
    """
    A guest's appointment with a host.

    Lifecycle:
    - created CONFIRMED by BookingManager.create_booking
    - flipped to CANCELLED by the host (row is kept, cancel_reason recorded)
    """
    class Status(models.TextChoices):
        CONFIRMED = "CONFIRMED", "Confirmed"
        CANCELLED = "CANCELLED", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_type = models.ForeignKey(EventType, on_delete=models.CASCADE, related_name="bookings")
    guest_name = models.CharField(max_length=200)
    guest_email = models.EmailField()
    guest_timezone = models.CharField(max_length=64)
    guest_notes = models.TextField(blank=True, max_length=500)
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.CONFIRMED,
        help_text="Booking lifecycle status",
    )
    cancel_reason = models.TextField(blank=True, null=True)
    cancelled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the booking was cancelled (if applicable).",
    )
    external_event_id = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["status", "start_time"], name="booking_status_start_idx"),
        ]

    def __str__(self):
        return f"{self.guest_name} → {self.event_type.title} on {self.start_time}"

    @property
    def host(self):
        return self.event_type.host


# -------------------------
# External calendar credentials
# -------------------------
class CalendarCredential(models.Model):
    """
    OAuth tokens for a host's Google calendar. No row means "not connected";
    the calendar adapter then reports no busy time and mirrors nothing.
    """
    host = models.OneToOneField(Host, on_delete=models.CASCADE, related_name="calendar_credential")
    access_token = models.TextField()
    refresh_token = models.TextField(blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    calendar_id = models.CharField(max_length=255, default="primary")
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Calendar for {self.host.slug} ({self.calendar_id})"
