# booking/urls.py
#
# Purpose:
# - Expose the scheduling JSON API via a DRF router plus a few plain paths.
#
# Public (no login):
#   GET  hosts/<host_slug>/                                   host page
#   GET  hosts/<host_slug>/event-types/<event_slug>/slots/    slots for ?date=
#   POST bookings/                                            create booking
#
# Host (session login):
#   bookings/ (list, detail, cancel), event-types/ (CRUD + toggle),
#   availability/ (GET/PUT weekly template), me/ (profile), auth/*

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .auth_views import HostLoginView, HostLogoutView, HostSignupView
from .views import (
    AvailabilityView,
    BookingViewSet,
    EventTypeViewSet,
    HostProfileView,
    PublicHostView,
    SlotsView,
)

# --------------------------
# DRF Router registrations
# --------------------------
router = DefaultRouter()
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"event-types", EventTypeViewSet, basename="event-type")

profile = HostProfileView.as_view({"get": "retrieve", "put": "update", "patch": "partial_update"})
slug_available = HostProfileView.as_view({"get": "slug_available"})

# --------------------------
# URL patterns
# --------------------------
urlpatterns = [
    # 1) REST API (JSON) - viewsets above
    path("", include(router.urls)),

    # 2) Public booking pages (JSON)
    path("hosts/<slug:host_slug>/", PublicHostView.as_view(), name="public-host"),
    path(
        "hosts/<slug:host_slug>/event-types/<slug:event_slug>/slots/",
        SlotsView.as_view(),
        name="slots",
    ),

    # 3) Host settings
    path("availability/", AvailabilityView.as_view(), name="availability"),
    path("me/", profile, name="host-profile"),
    path("me/slug-available/", slug_available, name="host-slug-available"),

    # 4) Auth API (JSON) - session login for hosts
    path("auth/signup", HostSignupView.as_view(), name="auth-signup"),
    path("auth/login", HostLoginView.as_view(), name="auth-login"),
    path("auth/logout", HostLogoutView.as_view(), name="auth-logout"),
]
