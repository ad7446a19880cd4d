"""
availability_manager.py
-----------------------
Reads and replaces a host's weekly availability template.

The template is replaced wholesale on every save: all existing rows are
deleted and the submitted ones recreated inside one transaction, so callers
either see the old week or the new week, never a mix.
"""

import logging

from django.db import transaction

from ..models import Availability
from ..serializers import AvailabilityDaySerializer
from .errors import InvalidInput, first_error

logger = logging.getLogger(__name__)


class AvailabilityManager:
    def get_weekly_template(self, host):
        return Availability.objects.filter(host=host).order_by("day_of_week")

    def validate_days(self, days):
        if not isinstance(days, list):
            raise InvalidInput("Expected a list of weekdays.")
        if len(days) > 7:
            raise InvalidInput("A week has at most 7 days.")

        serializer = AvailabilityDaySerializer(data=days, many=True)
        if not serializer.is_valid():
            raise InvalidInput(first_error(serializer.errors))

        seen = set()
        for day in serializer.validated_data:
            dow = day["day_of_week"]
            if dow in seen:
                raise InvalidInput(f"{Availability.Weekday(dow).label} appears more than once.")
            seen.add(dow)
            # Zero-padded HH:MM compares correctly as strings.
            if day.get("is_enabled", True) and day["start_time"] >= day["end_time"]:
                raise InvalidInput(
                    f"End time must be after start time ({Availability.Weekday(dow).label})."
                )
        return serializer.validated_data

    def save_weekly_template(self, host, days):
        """
        Replace the host's template with 'days'.

        Args:
            host: Host instance (the authenticated caller)
            days: list of {"day_of_week", "start_time", "end_time", "is_enabled"}

        Raises:
            InvalidInput: any malformed entry; nothing is changed in that case.
        """
        cleaned = self.validate_days(days)

        with transaction.atomic():
            Availability.objects.filter(host=host).delete()
            Availability.objects.bulk_create(
                [
                    Availability(
                        host=host,
                        day_of_week=day["day_of_week"],
                        start_time=day["start_time"],
                        end_time=day["end_time"],
                        is_enabled=day.get("is_enabled", True),
                    )
                    for day in cleaned
                ]
            )

        logger.info("Saved weekly availability for host %s (%d days)", host.slug, len(cleaned))
        return self.get_weekly_template(host)
