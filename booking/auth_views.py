# booking/auth_views.py
#
# Session auth for hosts. Guests never log in.
#
#   POST /api/auth/signup  {username, password, name, email} -> User + Host
#   POST /api/auth/login   {username, password}
#   POST /api/auth/logout
#
import logging
import re

from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.models import User
from django.db import transaction
from django.utils.text import slugify
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Host
from .services.errors import InvalidInput, first_error

logger = logging.getLogger(__name__)


def _unique_host_slug(base: str) -> str:
    """
    slugify(name), trimmed to 30 chars and suffixed -2, -3 ... until unused.
    """
    slug = re.sub(r"[^a-z0-9-]", "", slugify(base))[:30] or "host"
    if len(slug) < 3:
        slug = f"{slug}-host"
    candidate, n = slug, 1
    while Host.objects.filter(slug=candidate).exists():
        n += 1
        suffix = f"-{n}"
        candidate = f"{slug[:30 - len(suffix)]}{suffix}"
    return candidate


class SignupSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=8, write_only=True)
    name = serializers.CharField(min_length=2, max_length=200)
    email = serializers.EmailField()

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("Username already taken.")
        return value

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already used.")
        return value


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


def _validated(serializer_class, data):
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise InvalidInput(first_error(serializer.errors))
    return serializer.validated_data


class HostSignupView(APIView):
    """
    Creates the Django user and its Host profile (slug derived from the name,
    timezone UTC until changed through /api/me/), then starts a session.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        data = _validated(SignupSerializer, request.data)

        with transaction.atomic():
            user = User.objects.create_user(
                username=data["username"], password=data["password"], email=data["email"]
            )
            host = Host.objects.create(
                user=user,
                name=data["name"].strip(),
                email=data["email"],
                slug=_unique_host_slug(data["name"]),
            )
        logger.info("Host %s signed up", host.slug)

        login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        return Response({"slug": host.slug}, status=status.HTTP_201_CREATED)


class HostLoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        data = _validated(LoginSerializer, request.data)
        user = authenticate(request, username=data["username"], password=data["password"])
        if user is None:
            raise InvalidInput("Invalid credentials.")

        login(request, user)
        return Response({"username": user.username, "is_host": hasattr(user, "host")})


class HostLogoutView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)
