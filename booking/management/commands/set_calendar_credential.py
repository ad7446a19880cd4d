"""
set_calendar_credential.py
--------------------------
Stores (or replaces) the Google Calendar OAuth tokens of a host. Tokens come
from whatever OAuth consent flow the deployment uses (e.g. the OAuth
Playground with the app's client id and the calendar scope).

Usage:
    python manage.py set_calendar_credential jane --access-token ya29... --refresh-token 1//0g...
    python manage.py set_calendar_credential jane --calendar-id team@example.com --access-token ...
    python manage.py set_calendar_credential jane --disconnect
"""

import logging
from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from booking.models import CalendarCredential, Host

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Connect (or disconnect) a host's Google calendar by storing its OAuth tokens."

    def add_arguments(self, parser):
        parser.add_argument("host_slug", help="Slug of the host.")
        parser.add_argument("--access-token", help="OAuth access token.")
        parser.add_argument("--refresh-token", help="OAuth refresh token (kept if omitted).")
        parser.add_argument(
            "--expires-in",
            type=int,
            default=3600,
            help="Seconds until the access token expires (default 3600).",
        )
        parser.add_argument("--calendar-id", default="primary", help="Calendar to use (default primary).")
        parser.add_argument("--disconnect", action="store_true", help="Remove the stored tokens.")

    def handle(self, *args, **options):
        host = Host.objects.filter(slug=options["host_slug"]).first()
        if host is None:
            raise CommandError(f"No host with slug '{options['host_slug']}'.")

        if options["disconnect"]:
            deleted, _ = CalendarCredential.objects.filter(host=host).delete()
            logger.info("Calendar disconnected for host %s", host.slug)
            self.stdout.write(self.style.SUCCESS(f"Disconnected calendar for {host.slug} ({deleted} removed)."))
            return

        if not options["access_token"]:
            raise CommandError("--access-token is required unless --disconnect is given.")

        defaults = {
            "access_token": options["access_token"],
            "expires_at": timezone.now() + timedelta(seconds=options["expires_in"]),
            "calendar_id": options["calendar_id"],
        }
        if options["refresh_token"] is not None:
            defaults["refresh_token"] = options["refresh_token"]

        _, created = CalendarCredential.objects.update_or_create(host=host, defaults=defaults)
        logger.info("Calendar credential %s for host %s", "created" if created else "updated", host.slug)
        self.stdout.write(
            self.style.SUCCESS(f"Calendar '{options['calendar_id']}' connected for {host.slug}.")
        )
