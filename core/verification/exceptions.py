class OTPError(Exception):
    """Base class for email code failures. ``code`` is stable for API clients."""

    code = "otp_error"
    default_message = "Verification failed."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class OTPNotFound(OTPError):
    code = "not_found"
    default_message = "No active verification code. Please request a new one."


class OTPExpired(OTPError):
    code = "expired"
    default_message = "This verification code has expired. Please request a new one."


class InvalidOTP(OTPError):
    code = "invalid"
    default_message = "Invalid verification code."

    def __init__(self, remaining_attempts, message=None):
        super().__init__(message)
        self.remaining_attempts = remaining_attempts


class OTPRateLimited(OTPError):
    code = "rate_limited"
    default_message = "Please wait before requesting another code."

    def __init__(self, retry_after, message=None):
        super().__init__(message)
        self.retry_after = retry_after


class OTPDeliveryFailed(OTPError):
    code = "delivery_failed"
    default_message = "Failed to send verification code. Please try again."


class AlreadyVerified(OTPError):
    code = "already_verified"
    default_message = "Your email address is already verified."
