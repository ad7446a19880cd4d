from django.contrib import admin
from .models import Availability, Booking, CalendarCredential, EventType, Host


class AvailabilityInline(admin.TabularInline):
    model = Availability
    extra = 0


@admin.register(Host)
class HostAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "email", "timezone")
    search_fields = ("name", "slug", "email")
    inlines = [AvailabilityInline]

@admin.register(EventType)
class EventTypeAdmin(admin.ModelAdmin):
    list_display = ("title", "host", "slug", "duration", "is_active")
    list_filter = ("is_active",)
    search_fields = ("title", "slug", "host__slug")
    list_editable = ("is_active",)  # allow inline toggle

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("guest_name", "event_type", "start_time", "end_time", "status")
    list_filter = ("status", "event_type__host")
    search_fields = ("guest_name", "guest_email", "event_type__title")
    # Bookings are cancelled through the API so the calendar mirror is removed too.
    readonly_fields = ("start_time", "end_time", "external_event_id", "created_at")

@admin.register(CalendarCredential)
class CalendarCredentialAdmin(admin.ModelAdmin):
    list_display = ("host", "calendar_id", "expires_at", "updated_at")

    # Tokens can be pasted in when adding; afterwards they stay hidden.
    # See also: manage.py set_calendar_credential
    def get_exclude(self, request, obj=None):
        if obj is None:
            return ()
        return ("access_token", "refresh_token")
