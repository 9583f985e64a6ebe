from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings


def _encode(user, token_type, lifetime, **claims):
    issued_at = datetime.now(timezone.utc)
    payload = {
        "user_id": user.id,
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=lifetime),
        **claims,
    }
    return jwt.encode(payload, settings.JWT_PRIVATE_KEY, algorithm=settings.JWT_ALGORITHM)


def generate_access_token(user):
    """
    Short-lived token sent as ``Authorization: Bearer``.
    Carries the username so clients can render without a lookup.
    """
    return _encode(
        user,
        "access",
        settings.JWT_ACCESS_TOKEN_LIFETIME,
        username=user.username,
    )


def generate_refresh_token(user):
    return _encode(user, "refresh", settings.JWT_REFRESH_TOKEN_LIFETIME)


def decode_token(token):
    """The payload of a valid, unexpired token, or None."""
    try:
        return jwt.decode(token, settings.JWT_PUBLIC_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def generate_tokens(user):
    return {
        "access_token": generate_access_token(user),
        "refresh_token": generate_refresh_token(user),
    }
