from celery import shared_task
import logging

from .emails import send_verification_code_email
from .exceptions import OTPDeliveryFailed

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=10)
def send_verification_code_email_task(self, email, otp):
    """
    Async delivery of a verification code.
    Retries a few times; the code itself stays valid until it expires.
    """
    try:
        send_verification_code_email(email, otp)
    except OTPDeliveryFailed as exc:
        logger.warning("Verification code delivery to %s failed, retrying", email)
        raise self.retry(exc=exc)


@shared_task
def purge_expired_codes_task():
    """Periodic cleanup of codes nobody redeemed."""
    from .services import VerificationCodeService

    deleted = VerificationCodeService.purge_expired()
    logger.info("Purged %s expired verification code(s)", deleted)
    return deleted
