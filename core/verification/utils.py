import hmac
import secrets
from hashlib import sha256

from django.conf import settings


def generate_otp_code(length=6):
    """Uniform numeric code of fixed width (leading zeros kept)."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def hash_otp(user_id, purpose: str, otp: str) -> str:
    normalized = f"{user_id}:{purpose}:{otp.strip()}".encode("utf-8")
    return hmac.new(settings.SECRET_KEY.encode("utf-8"), normalized, sha256).hexdigest()
