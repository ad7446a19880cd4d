# reports/views.py

import logging
from datetime import timedelta

from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.models import Booking
from booking.services.slot_utils import day_range
from booking.views import IsHost, current_host

logger = logging.getLogger(__name__)

REPORT_DAYS = 30


def _per_day(qs, zone):
    rows = (
        qs.annotate(day=TruncDate("start_time", tzinfo=zone))
        .values("day")
        .annotate(count=Count("id"))
        .order_by("day")
    )
    return [{"day": row["day"].isoformat(), "count": row["count"]} for row in rows]


class ReportsView(APIView):
    """
    GET /api/reports/summary

    Dashboard numbers for the logged-in host:
    - bookings_today: confirmed bookings starting today (host's local day)
    - upcoming: confirmed bookings from now on
    - active_event_types: number of bookable event types
    - bookings_per_day: [{ "day": "YYYY-MM-DD", "count": N }, ...] last 30 days
    - cancellations_per_day: same shape, cancelled bookings only
    """
    permission_classes = [IsHost]

    def get(self, request):
        host = current_host(request)
        zone = host.zone
        now = timezone.now()

        today_start, today_end = day_range(timezone.localtime(now, zone).date(), zone)
        since = now - timedelta(days=REPORT_DAYS)

        bookings = Booking.objects.for_host(host)
        confirmed = bookings.filter(status=Booking.Status.CONFIRMED)

        data = {
            "bookings_today": confirmed.filter(
                start_time__gte=today_start, start_time__lt=today_end
            ).count(),
            "upcoming": confirmed.filter(start_time__gte=now).count(),
            "active_event_types": host.event_types.filter(is_active=True).count(),
            "bookings_per_day": _per_day(bookings.filter(start_time__gte=since), zone),
            "cancellations_per_day": _per_day(
                bookings.filter(status=Booking.Status.CANCELLED, start_time__gte=since), zone
            ),
        }
        logger.debug("Report summary for host %s: %s", host.slug, data)
        return Response(data)
