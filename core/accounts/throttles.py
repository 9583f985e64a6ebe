"""
Throttle classes for rate limiting different types of operations.

These throttles work with Django REST Framework's built-in throttling system.
Rates live in settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'].
"""

from rest_framework.throttling import SimpleRateThrottle


class _UserOrIPThrottle(SimpleRateThrottle):
    """Keys on the user id when authenticated, otherwise on client IP."""

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            ident = request.user.pk
        else:
            ident = self.get_ident(request)

        return self.cache_format % {
            "scope": self.scope,
            "ident": ident
        }


class AuthRateThrottle(SimpleRateThrottle):
    """
    Strict throttle for authentication endpoints (login, register).
    Keyed by IP since the caller is not authenticated yet.
    """
    scope = "auth"

    def get_cache_key(self, request, view):
        return self.cache_format % {
            "scope": self.scope,
            "ident": self.get_ident(request)
        }


class OTPRateThrottle(_UserOrIPThrottle):
    """
    Throttle for sending and verifying email codes.
    Complements the per-user cooldown enforced by the verification service.
    """
    scope = "otp"


class BurstRateThrottle(_UserOrIPThrottle):
    """
    Short burst throttle for likes and comments.
    """
    scope = "burst"


class NotificationRateThrottle(_UserOrIPThrottle):
    """
    Throttle for notifications feed polling.
    Kept higher than generic user throttle to support periodic refresh.
    """
    scope = "notifications"
