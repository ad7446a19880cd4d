"""Google Calendar provider.

Uses each host's OAuth tokens (CalendarCredential) against the Calendar API v3.
Every request goes through an httplib2 client with a bounded socket timeout,
and every failure is logged and reported as "no data" rather than raised.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone as dt_timezone
from typing import Any

import google_auth_httplib2
import httplib2
from django.conf import settings
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from ..models import CalendarCredential
from .calendar_provider import BusyInterval, CalendarEvent, CalendarProvider

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def _parse_rfc3339(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _utc_naive(dt: datetime | None) -> datetime | None:
    # google-auth compares expiry against a naive UTC clock
    if dt is None:
        return None
    return dt.astimezone(dt_timezone.utc).replace(tzinfo=None)


def to_busy_interval(event: dict, zone) -> BusyInterval | None:
    """
    Convert one Calendar API event into a BusyInterval.

    Returns None for events that don't occupy time: cancelled events, events
    the calendar owner declined, and events without usable start/end.
    All-day events carry 'date' instead of 'dateTime' and are anchored at
    midnight in the host's zone.
    """
    if event.get("status") == "cancelled":
        return None

    for attendee in event.get("attendees") or []:
        if attendee.get("self") and attendee.get("responseStatus") == "declined":
            return None

    start = event.get("start") or {}
    end = event.get("end") or {}

    if start.get("dateTime") and end.get("dateTime"):
        return BusyInterval(
            start=_parse_rfc3339(start["dateTime"]),
            end=_parse_rfc3339(end["dateTime"]),
            is_all_day=False,
        )

    if start.get("date") and end.get("date"):
        return BusyInterval(
            start=datetime.combine(date.fromisoformat(start["date"]), time.min, tzinfo=zone),
            end=datetime.combine(date.fromisoformat(end["date"]), time.min, tzinfo=zone),
            is_all_day=True,
        )

    return None


class GoogleCalendarProvider(CalendarProvider):
    """CalendarProvider backed by Google Calendar API v3."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or settings.GOOGLE_CLIENT_SECRET
        self.timeout = timeout or settings.CALENDAR_TIMEOUT_SECONDS

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_credential(self, host) -> CalendarCredential | None:
        return CalendarCredential.objects.filter(host=host).first()

    def _credentials(self, stored: CalendarCredential) -> Credentials:
        return Credentials(
            token=stored.access_token,
            refresh_token=stored.refresh_token or None,
            token_uri=TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=SCOPES,
            expiry=_utc_naive(stored.expires_at),
        )

    def _service(self, credentials: Credentials) -> Any:
        http = google_auth_httplib2.AuthorizedHttp(
            credentials, http=httplib2.Http(timeout=self.timeout)
        )
        return build("calendar", "v3", http=http, cache_discovery=False)

    def _save_refreshed_tokens(self, stored: CalendarCredential, credentials: Credentials) -> None:
        """Persist tokens if google-auth refreshed them during the call."""
        if not credentials.token or credentials.token == stored.access_token:
            return
        stored.access_token = credentials.token
        if credentials.refresh_token:
            stored.refresh_token = credentials.refresh_token
        if credentials.expiry is not None:
            stored.expires_at = credentials.expiry.replace(tzinfo=dt_timezone.utc)
        stored.save(update_fields=["access_token", "refresh_token", "expires_at", "updated_at"])
        logger.info("Refreshed Google Calendar token for host %s", stored.host_id)

    # ------------------------------------------------------------------
    # CalendarProvider interface
    # ------------------------------------------------------------------

    def list_busy_intervals(self, host, start, end):
        stored = self._get_credential(host)
        if stored is None:
            return []

        credentials = self._credentials(stored)
        try:
            response = (
                self._service(credentials)
                .events()
                .list(
                    calendarId=stored.calendar_id,
                    timeMin=start.isoformat(),
                    timeMax=end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                )
                .execute()
            )
        except Exception:
            logger.exception("Error fetching busy times for host %s", host.slug)
            return []
        self._save_refreshed_tokens(stored, credentials)

        zone = host.zone
        busy = []
        for item in response.get("items", []):
            interval = to_busy_interval(item, zone)
            if interval is not None:
                busy.append(interval)
        return busy

    def create_event(self, host, event: CalendarEvent):
        stored = self._get_credential(host)
        if stored is None:
            logger.info("No calendar connected for host %s; skipping mirror", host.slug)
            return None

        body = {
            "summary": event.title,
            "description": event.description or f"Meeting with {event.attendee_name}",
            "start": {"dateTime": event.start.isoformat(), "timeZone": event.timezone},
            "end": {"dateTime": event.end.isoformat(), "timeZone": event.timezone},
            "attendees": [
                {"email": event.attendee_email, "displayName": event.attendee_name},
            ],
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": 60},
                    {"method": "popup", "minutes": 30},
                ],
            },
        }

        credentials = self._credentials(stored)
        try:
            result = (
                self._service(credentials)
                .events()
                .insert(calendarId=stored.calendar_id, body=body, conferenceDataVersion=1)
                .execute()
            )
        except Exception:
            logger.exception("Error creating calendar event for host %s", host.slug)
            return None
        self._save_refreshed_tokens(stored, credentials)

        logger.info("Created event %s on calendar %s", result.get("id"), stored.calendar_id)
        return result.get("id")

    def delete_event(self, host, event_id):
        stored = self._get_credential(host)
        if stored is None:
            return False

        credentials = self._credentials(stored)
        try:
            (
                self._service(credentials)
                .events()
                .delete(calendarId=stored.calendar_id, eventId=event_id)
                .execute()
            )
        except Exception:
            logger.exception("Error deleting calendar event %s for host %s", event_id, host.slug)
            return False
        self._save_refreshed_tokens(stored, credentials)

        logger.info("Deleted event %s on calendar %s", event_id, stored.calendar_id)
        return True
