from django.conf import settings
from django.contrib.auth.models import User
from drf_spectacular.extensions import OpenApiAuthenticationExtension
from rest_framework import authentication, exceptions

from .utils import decode_token


def _token_from_request(request):
    """
    Returns ``(token, source)`` where source is ``"header"`` or ``"cookie"``.

    A bearer header always wins; the HttpOnly cookie is the browser fallback.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header:
        parts = auth_header.split(" ")
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
            return parts[1], "header"

    token = request.COOKIES.get(settings.JWT_ACCESS_COOKIE_NAME)
    if token:
        return token, "cookie"
    return None, None


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Bearer/cookie JWT authentication for Django REST Framework.

    The resolved user becomes ``request.user``; every view and service receives
    the acting user explicitly from there instead of looking it up globally.
    """

    def authenticate(self, request):
        token, source = _token_from_request(request)
        if not token:
            return None

        payload = decode_token(token)

        # Stale browser cookies are treated as anonymous so AllowAny endpoints
        # (register, login) keep working; a bad header is a hard failure.
        if not payload or payload.get("type") != "access":
            if source == "cookie":
                return None
            raise exceptions.AuthenticationFailed("Invalid or expired token")

        try:
            user = User.objects.select_related("profile").get(id=payload["user_id"])
        except User.DoesNotExist:
            if source == "cookie":
                return None
            raise exceptions.AuthenticationFailed("User not found")

        if not user.is_active:
            raise exceptions.AuthenticationFailed("User account is disabled.")

        return (user, token)

    def authenticate_header(self, request):
        return "Bearer"


class JWTAuthenticationScheme(OpenApiAuthenticationExtension):
    # OpenAPI schema adapter for the JWT authentication class

    target_class = "accounts.authentication.JWTAuthentication"
    name = "JWTAuth"

    def get_security_definition(self, auto_schema):
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
