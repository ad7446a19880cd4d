"""
seed_demo.py
------------
Creates (or updates) a demo host with a few event types and a Mon-Fri
09:00-17:00 week. Safe to run repeatedly; it upserts by username / slug.

Usage:
    python manage.py seed_demo
    python manage.py seed_demo --timezone America/Bogota
"""

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction

from booking.models import Availability, EventType, Host


DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo-password"

EVENT_TYPES = [
    {"slug": "intro-call", "title": "Intro call", "duration": 15, "color": "#10b981",
     "description": "A quick hello."},
    {"slug": "consultation", "title": "Consultation", "duration": 30, "color": "#3b82f6",
     "description": "Talk through your project."},
    {"slug": "deep-dive", "title": "Deep dive", "duration": 60, "color": "#8b5cf6",
     "description": "One hour working session."},
]

WORKWEEK = [
    Availability.Weekday.MONDAY,
    Availability.Weekday.TUESDAY,
    Availability.Weekday.WEDNESDAY,
    Availability.Weekday.THURSDAY,
    Availability.Weekday.FRIDAY,
]


class Command(BaseCommand):
    help = "Seed a demo host with event types and weekday availability."

    def add_arguments(self, parser):
        parser.add_argument("--timezone", default="UTC", help="IANA timezone of the demo host.")

    @transaction.atomic
    def handle(self, *args, **options):
        user, user_created = User.objects.get_or_create(
            username=DEMO_USERNAME, defaults={"email": "demo@example.com"}
        )
        if user_created:
            user.set_password(DEMO_PASSWORD)
            user.save()

        host, _ = Host.objects.update_or_create(
            user=user,
            defaults={
                "name": "Demo Host",
                "email": user.email,
                "slug": "demo",
                "bio": "Pick a time that works for you.",
                "timezone": options["timezone"],
            },
        )

        created = 0
        updated = 0
        for item in EVENT_TYPES:
            _, is_created = EventType.objects.update_or_create(
                host=host,
                slug=item["slug"],
                defaults={
                    "title": item["title"],
                    "duration": item["duration"],
                    "color": item["color"],
                    "description": item["description"],
                    "is_active": True,
                },
            )
            if is_created:
                created += 1
            else:
                updated += 1

        Availability.objects.filter(host=host).delete()
        Availability.objects.bulk_create(
            [
                Availability(
                    host=host,
                    day_of_week=day,
                    start_time="09:00",
                    end_time="17:00",
                    is_enabled=day in WORKWEEK,
                )
                for day in Availability.Weekday.values
            ]
        )

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed complete for /{host.slug}. Event types created={created}, updated={updated}"
            )
        )
