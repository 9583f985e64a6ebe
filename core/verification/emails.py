import logging
from datetime import datetime
from html import escape

from django.conf import settings
from django.core.mail import send_mail

from .exceptions import OTPDeliveryFailed

logger = logging.getLogger(__name__)


def _minutes(seconds):
    minutes = max(1, seconds // 60)
    return f"{minutes} minute{'s' if minutes != 1 else ''}"


def _verification_email_html(otp, ttl_seconds):
    safe_otp = escape(str(otp))
    year = datetime.now().year
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Verify your email</title>
</head>
<body style="margin:0;padding:0;background:#F3F4F6;color:#111827;font-family:Segoe UI,Arial,sans-serif;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="padding:24px 12px;">
    <tr>
      <td align="center">
        <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="max-width:560px;background:#FFFFFF;border:1px solid #E5E7EB;border-radius:14px;">
          <tr>
            <td style="padding:28px 24px 10px;text-align:center;">
              <div style="font-size:16px;color:#374151;">Your email verification code</div>
            </td>
          </tr>
          <tr>
            <td style="padding:12px 24px;text-align:center;">
              <div style="display:inline-block;font-size:34px;line-height:1;font-weight:800;letter-spacing:8px;padding:16px 22px;background:#F9FAFB;color:#1D4ED8;border:1px dashed #9CA3AF;border-radius:10px;">
                {safe_otp}
              </div>
            </td>
          </tr>
          <tr>
            <td style="padding:8px 24px 26px;text-align:center;color:#6B7280;font-size:14px;">
              This code expires in {_minutes(ttl_seconds)}. If you did not request it, ignore this email.
            </td>
          </tr>
          <tr>
            <td style="padding:14px 24px;border-top:1px solid #E5E7EB;text-align:center;color:#9CA3AF;font-size:12px;">
              &copy; {year}
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def send_verification_code_email(email, otp):
    """
    Send an email verification code.

    Raises OTPDeliveryFailed when the mail backend rejects the message, so the
    caller can tell delivery problems apart from validation problems.
    """
    ttl_seconds = settings.OTP_TTL_SECONDS
    plain_message = (
        f"Your email verification code is {otp}.\n\n"
        f"This code expires in {_minutes(ttl_seconds)}.\n"
        "If you didn't request this, ignore this email."
    )

    try:
        send_mail(
            subject="Your email verification code",
            message=plain_message,
            from_email=None,  # Uses DEFAULT_FROM_EMAIL from settings
            recipient_list=[email],
            html_message=_verification_email_html(otp, ttl_seconds),
            fail_silently=False,
        )
    except Exception as exc:
        logger.exception("Failed to send verification code email to %s", email)
        raise OTPDeliveryFailed() from exc

    logger.info("Verification code email sent to %s", email)
