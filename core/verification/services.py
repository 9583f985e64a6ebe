import hmac
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.utils import timezone

from notifications.models import Notification
from notifications.services import NotificationService
from users.models import UserProfile
from .emails import send_verification_code_email
from .exceptions import (
    AlreadyVerified,
    InvalidOTP,
    OTPDeliveryFailed,
    OTPExpired,
    OTPNotFound,
    OTPRateLimited,
)
from .models import IdentityDocument, VerificationCode
from .tasks import send_verification_code_email_task
from .utils import generate_otp_code, hash_otp

logger = logging.getLogger(__name__)

EMAIL_VERIFICATION = VerificationCode.Purpose.EMAIL_VERIFICATION


def _now():
    return timezone.now()


@dataclass
class IssuedCode:
    code: str
    expires_at: datetime
    record: VerificationCode


@dataclass
class VerificationResult:
    verified_at: datetime | None
    already_verified: bool = False


class VerificationCodeService:
    """
    Issues and validates one-time codes per (user, purpose).

    Both operations lock the user's profile row, so issue/validate calls for
    the same user run one at a time and the attempt counter cannot lose updates.
    """

    @staticmethod
    def _request_key(user_id, purpose) -> str:
        return f"verification:otp:request_count:{purpose}:{user_id}"

    @staticmethod
    def _count_request(request_key):
        # add() opens the window without resetting it; incr() is atomic in the cache
        window = settings.OTP_REQUEST_WINDOW_SECONDS
        cache.add(request_key, 0, timeout=window)
        try:
            return cache.incr(request_key)
        except ValueError:
            # window closed between add() and incr()
            cache.set(request_key, 1, timeout=window)
            return 1

    @staticmethod
    def _lock_profile(user):
        profile, _ = UserProfile.objects.select_for_update().get_or_create(user=user)
        return profile

    @staticmethod
    def issue(user, purpose=EMAIL_VERIFICATION):
        """
        Generates a new code for ``user``, replacing any previous one, and
        emails it.

        Raises OTPRateLimited, AlreadyVerified or OTPDeliveryFailed.
        """
        if not user.email:
            raise OTPDeliveryFailed("No email address on file.")

        request_key = VerificationCodeService._request_key(user.pk, purpose)
        request_count = cache.get(request_key, 0)
        if request_count >= settings.OTP_REQUEST_MAX:
            raise OTPRateLimited(
                retry_after=settings.OTP_REQUEST_WINDOW_SECONDS,
                message="Too many verification codes requested. Please try again later.",
            )

        now = _now()
        code = generate_otp_code(settings.OTP_CODE_LENGTH)

        with transaction.atomic():
            profile = VerificationCodeService._lock_profile(user)
            if purpose == EMAIL_VERIFICATION and profile.email_verified_at is not None:
                raise AlreadyVerified()

            previous = (
                VerificationCode.objects.select_for_update()
                .filter(user=user, purpose=purpose)
                .first()
            )
            if previous is not None:
                elapsed = (now - previous.created_at).total_seconds()
                cooldown = settings.OTP_RESEND_COOLDOWN_SECONDS
                if elapsed < cooldown:
                    raise OTPRateLimited(retry_after=math.ceil(cooldown - elapsed))
                previous.delete()

            record = VerificationCode.objects.create(
                user=user,
                purpose=purpose,
                code_hash=hash_otp(user.pk, purpose, code),
                created_at=now,
                expires_at=now + timedelta(seconds=settings.OTP_TTL_SECONDS),
            )

        VerificationCodeService._count_request(request_key)

        try:
            VerificationCodeService._deliver(user.email, code)
        except OTPDeliveryFailed:
            # Drop the undelivered code so the user can retry without waiting
            # out the resend cooldown.
            VerificationCode.objects.filter(pk=record.pk).delete()
            raise

        logger.info("Issued %s code for user %s", purpose, user.pk)
        return IssuedCode(code=code, expires_at=record.expires_at, record=record)

    @staticmethod
    def _deliver(email, code):
        if settings.OTP_EMAIL_ASYNC:
            try:
                send_verification_code_email_task.delay(email, code)
                return
            except Exception:
                logger.exception(
                    "Failed to enqueue verification email task. Falling back to sync send for %s",
                    email,
                )
        send_verification_code_email(email, code)

    @staticmethod
    def validate(user, purpose, submitted_code):
        """
        Checks ``submitted_code`` against the active code for (user, purpose).

        On success the code is consumed and, for email verification, the
        profile's ``email_verified_at`` is set. Repeating a successful
        submission after the email is verified is a no-op success.

        Raises OTPNotFound, OTPExpired or InvalidOTP. Failures are raised after
        the transaction commits so attempt counting and invalidation persist.
        """
        submitted_code = (submitted_code or "").strip()
        now = _now()
        failure = None
        result = None

        with transaction.atomic():
            profile = VerificationCodeService._lock_profile(user)
            record = (
                VerificationCode.objects.select_for_update()
                .filter(user=user, purpose=purpose)
                .first()
            )

            if record is None:
                if purpose == EMAIL_VERIFICATION and profile.email_verified_at is not None:
                    result = VerificationResult(
                        verified_at=profile.email_verified_at, already_verified=True
                    )
                else:
                    failure = OTPNotFound()

            elif record.is_expired(now):
                record.delete()
                failure = OTPExpired()

            elif not hmac.compare_digest(
                record.code_hash, hash_otp(user.pk, purpose, submitted_code)
            ):
                record.attempt_count += 1
                remaining = max(0, settings.OTP_MAX_ATTEMPTS - record.attempt_count)
                if remaining == 0:
                    record.delete()
                    failure = InvalidOTP(
                        remaining_attempts=0,
                        message="Too many invalid attempts. Please request a new code.",
                    )
                else:
                    record.save(update_fields=["attempt_count"])
                    failure = InvalidOTP(remaining_attempts=remaining)

            else:
                record.delete()
                verified_at = None
                if purpose == EMAIL_VERIFICATION:
                    if profile.email_verified_at is None:
                        profile.email_verified_at = now
                        profile.save(update_fields=["email_verified_at", "updated_at"])
                    verified_at = profile.email_verified_at
                result = VerificationResult(verified_at=verified_at)

        if failure is not None:
            logger.warning(
                "Verification code check failed for user %s: %s", user.pk, failure.code
            )
            raise failure

        if not result.already_verified:
            cache.delete(VerificationCodeService._request_key(user.pk, purpose))
            logger.info("User %s completed %s", user.pk, purpose)
        return result

    @staticmethod
    def purge_expired():
        deleted, _ = VerificationCode.objects.filter(expires_at__lt=_now()).delete()
        return deleted


class IdentityVerificationError(Exception):
    pass


class IdentityVerificationService:
    @staticmethod
    def submit(user, document):
        """Stores an identity document and marks the profile as pending review."""
        with transaction.atomic():
            profile = VerificationCodeService._lock_profile(user)
            if profile.verification_status == UserProfile.VerificationStatus.VERIFIED:
                raise IdentityVerificationError("Your identity is already verified.")
            if profile.verification_status == UserProfile.VerificationStatus.PENDING:
                raise IdentityVerificationError("Your verification is already under review.")

            submission = IdentityDocument.objects.create(user=user, document=document)
            profile.verification_status = UserProfile.VerificationStatus.PENDING
            profile.save(update_fields=["verification_status", "updated_at"])

        logger.info("User %s submitted identity document %s", user.pk, submission.pk)
        return submission

    @staticmethod
    def review(submission, reviewer, approve, note=""):
        """Approves or rejects a pending submission and notifies the user."""
        with transaction.atomic():
            submission = IdentityDocument.objects.select_for_update().get(pk=submission.pk)
            if submission.status != IdentityDocument.Status.PENDING:
                raise IdentityVerificationError("This submission has already been reviewed.")

            profile = VerificationCodeService._lock_profile(submission.user)
            if approve:
                submission.status = IdentityDocument.Status.APPROVED
                profile.verification_status = UserProfile.VerificationStatus.VERIFIED
                notification_type = Notification.Type.IDENTITY_VERIFIED
            else:
                submission.status = IdentityDocument.Status.REJECTED
                profile.verification_status = UserProfile.VerificationStatus.UNVERIFIED
                notification_type = Notification.Type.IDENTITY_REJECTED

            submission.reviewed_at = timezone.now()
            submission.reviewed_by = reviewer
            submission.review_note = note or ""
            submission.save(update_fields=["status", "reviewed_at", "reviewed_by", "review_note"])
            profile.save(update_fields=["verification_status", "updated_at"])

            NotificationService.create(
                recipient=submission.user,
                type=notification_type,
                data={"submission_id": submission.pk, "note": submission.review_note},
            )

        return submission
