"""
booking_manager.py
------------------
Coordinates booking creation and cancellation.

create_booking() re-validates the requested slot at commit time, because the
slots the guest picked from may be stale:
1. validate the payload (first error wins)
2. resolve the active event type
3. anchor date + time to the host's wall clock; end = start + duration
4. reject slots that already started or overlap an active booking
5. reject slots the external calendar reports as busy (±1 minute window)
6. mirror the event to the external calendar (best effort)
7. lock the host row, re-check overlaps, insert the CONFIRMED booking
8. after commit, send confirmation emails (failures are only logged)

Step 7 is the double-booking guard: two concurrent commits for the same host
serialize on the host row, so the second one sees the first booking.
If step 7 fails, the mirrored event from step 6 is removed again.

cancel_booking() takes the authenticated host explicitly, removes the mirrored
event (best effort) and flips the status. Rows are never deleted.
"""

import logging
import uuid
from datetime import timedelta
from functools import partial

from django.db import DatabaseError, transaction
from django.utils import timezone

from ..models import Booking, EventType, Host
from ..serializers import BookingRequestSerializer
from .calendar_provider import CalendarEvent, get_calendar_provider
from .errors import AlreadyCancelled, BookingNotSaved, InvalidInput, NotFound, SlotUnavailable, first_error
from .notification_service import NotificationService
from .slot_utils import local_datetime, parse_day

logger = logging.getLogger(__name__)

BOOKING_SCOPES = ("upcoming", "past", "all")


class BookingManager:
    def __init__(self, calendar=None, notifier=None, clock=timezone.now):
        self.calendar = calendar if calendar is not None else get_calendar_provider()
        self.notifier = notifier if notifier is not None else NotificationService()
        self.clock = clock

    # ------------------------------------------------------------------
    # Conflict checks
    # ------------------------------------------------------------------

    def _has_booking_conflict(self, host, start_time, end_time) -> bool:
        return (
            Booking.objects.active()
            .for_host(host)
            .overlapping(start_time, end_time)
            .exists()
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_booking(self, payload) -> Booking:
        """
        Create a CONFIRMED booking from the guest's form data.

        Raises:
            InvalidInput: malformed payload
            NotFound: unknown or inactive event type
            SlotUnavailable: slot passed, taken, or busy on the host calendar
            BookingNotSaved: the database rejected the insert
        """
        serializer = BookingRequestSerializer(data=payload)
        if not serializer.is_valid():
            raise InvalidInput(first_error(serializer.errors))
        data = serializer.validated_data

        event_type = (
            EventType.objects.select_related("host")
            .filter(pk=data["event_type_id"], is_active=True)
            .first()
        )
        if event_type is None:
            raise NotFound("Event type not found or not available.")
        host = event_type.host

        # Anchored to the host's wall clock; guest_timezone is display-only.
        start_time = local_datetime(parse_day(data["date"]), data["time"], host.zone)
        end_time = start_time + timedelta(minutes=event_type.duration)

        if start_time <= self.clock():
            raise SlotUnavailable()
        if self._has_booking_conflict(host, start_time, end_time):
            raise SlotUnavailable()
        if not self.calendar.is_slot_available(host, start_time, end_time):
            raise SlotUnavailable()

        external_event_id = self._mirror(event_type, data, start_time, end_time)
        try:
            booking = self._persist(event_type, data, start_time, end_time, external_event_id)
        except (SlotUnavailable, BookingNotSaved):
            if external_event_id:
                self.calendar.delete_event(host, external_event_id)
            raise

        logger.info(
            "Booking %s confirmed for host %s at %s", booking.id, host.slug, start_time.isoformat()
        )
        transaction.on_commit(
            partial(self.notifier.send_booking_confirmation, booking), robust=True
        )
        return booking

    def _mirror(self, event_type, data, start_time, end_time):
        host = event_type.host
        event = CalendarEvent(
            title=f"{event_type.title} - {data['guest_name']}",
            description=data.get("guest_notes") or "",
            start=start_time,
            end=end_time,
            attendee_email=data["guest_email"],
            attendee_name=data["guest_name"],
            timezone=host.timezone,
        )
        try:
            external_event_id = self.calendar.create_event(host, event)
        except Exception:
            logger.exception("Calendar mirror failed for host %s", host.slug)
            return None
        if not external_event_id:
            logger.warning("Booking for host %s has no calendar mirror", host.slug)
        return external_event_id

    def _persist(self, event_type, data, start_time, end_time, external_event_id) -> Booking:
        host = event_type.host
        try:
            with transaction.atomic():
                # Serializes concurrent commits for the same host.
                Host.objects.select_for_update().get(pk=host.pk)
                if self._has_booking_conflict(host, start_time, end_time):
                    raise SlotUnavailable()
                return Booking.objects.create(
                    event_type=event_type,
                    guest_name=data["guest_name"],
                    guest_email=data["guest_email"],
                    guest_timezone=data["guest_timezone"],
                    guest_notes=data.get("guest_notes") or "",
                    start_time=start_time,
                    end_time=end_time,
                    status=Booking.Status.CONFIRMED,
                    external_event_id=external_event_id or None,
                )
        except DatabaseError:
            logger.exception("Could not save booking for host %s", host.slug)
            raise BookingNotSaved()

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    def cancel_booking(self, host, booking_id, reason=None) -> Booking:
        """
        Cancel one of the host's bookings.

        Raises:
            NotFound: no such booking for this host
            AlreadyCancelled: the booking is already CANCELLED
        """
        try:
            booking_id = uuid.UUID(str(booking_id))
        except ValueError:
            raise NotFound("Booking not found.")

        booking = (
            Booking.objects.select_related("event_type__host")
            .filter(pk=booking_id, event_type__host=host)
            .first()
        )
        if booking is None:
            raise NotFound("Booking not found.")
        if booking.status == Booking.Status.CANCELLED:
            raise AlreadyCancelled()

        if booking.external_event_id:
            try:
                deleted = self.calendar.delete_event(host, booking.external_event_id)
            except Exception:
                logger.exception("Calendar delete raised for booking %s", booking.id)
                deleted = False
            if not deleted:
                logger.warning(
                    "Could not remove calendar event %s for booking %s",
                    booking.external_event_id,
                    booking.id,
                )

        now = self.clock()
        with transaction.atomic():
            updated = (
                Booking.objects.filter(pk=booking.pk)
                .exclude(status=Booking.Status.CANCELLED)
                .update(status=Booking.Status.CANCELLED, cancel_reason=reason or None, cancelled_at=now)
            )
            if not updated:
                raise AlreadyCancelled()

        booking.status = Booking.Status.CANCELLED
        booking.cancel_reason = reason or None
        booking.cancelled_at = now
        logger.info("Booking %s cancelled by host %s", booking.id, host.slug)

        transaction.on_commit(partial(self.notifier.send_cancellation, booking), robust=True)
        return booking

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_bookings(self, host, scope: str = "upcoming"):
        if scope not in BOOKING_SCOPES:
            raise InvalidInput(f"Unknown scope '{scope}'. Use one of: {', '.join(BOOKING_SCOPES)}.")

        now = self.clock()
        qs = Booking.objects.for_host(host).select_related("event_type")
        if scope == "upcoming":
            return qs.active().filter(start_time__gte=now).order_by("start_time")
        if scope == "past":
            return qs.filter(start_time__lt=now).order_by("-start_time")
        return qs.order_by("start_time")
