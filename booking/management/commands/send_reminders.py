"""
send_reminders.py
-----------------
Django management command to email guests ahead of their meeting.

Usage:
    python manage.py send_reminders             # bookings starting in 24h
    python manage.py send_reminders --hours 2

Behavior:
- Finds CONFIRMED bookings whose start_time falls in [now + N h, now + N h + 1h).
  Run it hourly (cron) so every booking is picked up exactly once.
- Sends each guest a reminder via NotificationService; failures are counted,
  logged, and don't stop the run.
"""

import logging
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from booking.models import Booking
from booking.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Send reminders for confirmed bookings starting N hours from now."

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=int,
            default=24,
            help="How many hours ahead of the meeting to remind (default 24).",
        )

    def handle(self, *args, **options):
        hours = options["hours"]
        now = timezone.now()
        window_start = now + timedelta(hours=hours)
        window_end = window_start + timedelta(hours=1)

        qs = (
            Booking.objects.filter(
                status=Booking.Status.CONFIRMED,
                start_time__gte=window_start,
                start_time__lt=window_end,
            )
            .select_related("event_type__host")
            .order_by("start_time")
        )

        notifier = NotificationService()
        sent = failed = 0
        for booking in qs:
            if notifier.send_reminder(booking):
                sent += 1
            else:
                failed += 1

        logger.info("Reminders for %sh window: sent=%d failed=%d", hours, sent, failed)
        self.stdout.write(self.style.SUCCESS(f"Sent {sent} reminder(s), {failed} failed, for {hours}h window."))
