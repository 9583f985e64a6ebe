import logging

from .countdown import ResendCountdown
from .exceptions import ApiError, FeedClientError, ValidationError

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


class EmailVerificationFlow:
    """
    Client side of the two-step email check: request a code, then submit it.

    ``error`` holds the last message to show; ``verified_at`` is set from the
    server once the code is accepted.
    """

    def __init__(self, api, countdown=None):
        self.api = api
        self.countdown = countdown or ResendCountdown()
        self.code_sent = False
        self.expires_at = None
        self.verified_at = None
        self.error = None

    @property
    def verified(self) -> bool:
        return self.verified_at is not None

    def request_code(self, auto_tick=False):
        """Asks the server to email a code. Returns True when one was sent."""
        self.error = None
        try:
            body = self.api.send_email_otp()
        except ApiError as exc:
            if exc.retry_after:
                # The server's cooldown is binding; show it on the button
                self.countdown.start(exc.retry_after, auto=auto_tick)
            if exc.code == "already_verified":
                self.code_sent = False
            self.error = exc.first_message("email") or "Failed to send verification code. Please try again."
            return False
        except FeedClientError as exc:
            self.error = str(exc)
            return False

        self.code_sent = True
        self.expires_at = body.get("expires_at")
        self.countdown.start(auto=auto_tick)
        return True

    def resend(self, auto_tick=False):
        if not self.countdown.can_resend():
            return False
        return self.request_code(auto_tick=auto_tick)

    def submit(self, otp):
        """
        Sends the code. Returns True once the email is verified.

        A countdown at zero does not stop a submission: only the server
        decides whether the code has expired.
        """
        otp = (otp or "").strip()
        if len(otp) != CODE_LENGTH or not otp.isdigit():
            raise ValidationError({"otp": f"Enter the {CODE_LENGTH}-digit code."})

        self.error = None
        try:
            body = self.api.verify_email_otp(otp)
        except ApiError as exc:
            self.error = exc.first_message("otp") or "Invalid OTP. Please try again."
            if exc.code in ("expired", "not_found") or exc.body.get("remaining_attempts") == 0:
                # The server dropped the code; the user has to request a new one
                self.code_sent = False
                self.countdown.cancel()
            return False
        except FeedClientError as exc:
            self.error = str(exc)
            return False

        self.verified_at = body.get("email_verified_at")
        self.code_sent = False
        self.countdown.cancel()
        logger.info("Email verified at %s", self.verified_at)
        return True
