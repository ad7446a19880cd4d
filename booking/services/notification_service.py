"""
NotificationService
-------------------
Sends booking-related emails:
- confirmation to the guest + "new booking" alert to the host
- cancellation notice to the guest
- reminder to the guest (send_reminders management command)

Emails go through Django's send_mail, so EMAIL_BACKEND decides where they end
up (console in development, SMTP in production, locmem in tests).

Every message is isolated: a failure is logged and recorded as an unsent
Notification, and never propagates to the caller. A committed booking is never
affected by an email problem.
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from notifications.models import Notification

logger = logging.getLogger(__name__)


def _guest_zone(booking):
    try:
        return ZoneInfo(booking.guest_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return booking.event_type.host.zone


def _format_when(dt, zone):
    local = timezone.localtime(dt, zone)
    return local.strftime("%A, %B %d, %Y"), local.strftime("%I:%M %p").lstrip("0")


class NotificationService:
    """
    Sends confirmation, cancellation and reminder emails for bookings.
    """

    def _send(self, booking, kind, subject, body, recipient) -> bool:
        """
        Send one email and record it. Returns True if it was handed to the backend.
        """
        if not recipient:
            return False
        sent = False
        try:
            send_mail(
                subject=subject,
                message=body,
                from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
                recipient_list=[recipient],
                fail_silently=False,  # raise so we can log; we still catch it below
            )
            sent = True
            logger.info("Sent %s email to %s", kind, recipient)
        except Exception:
            logger.exception("Could not send %s email to %s", kind, recipient)

        try:
            Notification.objects.create(
                booking=booking,
                recipient=recipient,
                kind=kind,
                subject=subject,
                message=body,
                sent=sent,
            )
        except Exception:
            logger.exception("Could not record %s notification for booking %s", kind, booking.pk)
        return sent

    def send_booking_confirmation(self, booking) -> None:
        """
        Email the guest a confirmation and the host a "new booking" alert.

        Args:
            booking: Booking just committed (event_type and host are read from it).
        """
        event_type = booking.event_type
        host = event_type.host

        day, at = _format_when(booking.start_time, _guest_zone(booking))
        guest_body = (
            f"Hi {booking.guest_name},\n\n"
            f"Your meeting with {host.name} is confirmed.\n\n"
            f"- Event: {event_type.title}\n"
            f"- Date: {day}\n"
            f"- Time: {at} ({booking.guest_timezone})\n"
            f"- Duration: {event_type.duration} minutes\n"
        )
        if booking.guest_notes:
            guest_body += f"- Notes: {booking.guest_notes}\n"
        self._send(
            booking,
            Notification.Kind.CONFIRMATION,
            f"Confirmed: {event_type.title} with {host.name}",
            guest_body,
            booking.guest_email,
        )

        if host.email:
            day, at = _format_when(booking.start_time, host.zone)
            dashboard_url = f"{getattr(settings, 'SITE_URL', '').rstrip('/')}/dashboard/bookings"
            host_body = (
                f"Hi {host.name},\n\n"
                f"You have a new booking.\n\n"
                f"- Event: {event_type.title}\n"
                f"- Guest: {booking.guest_name} ({booking.guest_email})\n"
                f"- Date: {day}\n"
                f"- Time: {at} ({host.timezone})\n"
                f"- Duration: {event_type.duration} minutes\n"
            )
            if booking.guest_notes:
                host_body += f"- Notes: {booking.guest_notes}\n"
            host_body += f"\nManage your bookings: {dashboard_url}\n"
            self._send(
                booking,
                Notification.Kind.HOST_ALERT,
                f"New booking: {event_type.title} with {booking.guest_name}",
                host_body,
                host.email,
            )

    def send_cancellation(self, booking) -> None:
        event_type = booking.event_type
        host = event_type.host
        day, at = _format_when(booking.start_time, _guest_zone(booking))
        body = (
            f"Dear {booking.guest_name},\n\n"
            f"Your {event_type.title} with {host.name} on {day} at {at} has been cancelled.\n"
        )
        if booking.cancel_reason:
            body += f"Reason: {booking.cancel_reason}\n"
        self._send(
            booking,
            Notification.Kind.CANCELLATION,
            f"Cancelled: {event_type.title} with {host.name}",
            body,
            booking.guest_email,
        )

    def send_reminder(self, booking) -> bool:
        event_type = booking.event_type
        host = event_type.host
        day, at = _format_when(booking.start_time, _guest_zone(booking))
        body = (
            f"Hi {booking.guest_name},\n\n"
            f"This is a reminder of your {event_type.title} with {host.name}.\n\n"
            f"- Date: {day}\n"
            f"- Time: {at} ({booking.guest_timezone})\n"
            f"- Duration: {event_type.duration} minutes\n"
        )
        return self._send(
            booking,
            Notification.Kind.REMINDER,
            f"Reminder: {event_type.title} with {host.name}",
            body,
            booking.guest_email,
        )
