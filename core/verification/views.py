from django.conf import settings
from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from accounts.throttles import OTPRateThrottle
from project.responses import error_response, success_response
from .exceptions import (
    AlreadyVerified,
    InvalidOTP,
    OTPDeliveryFailed,
    OTPError,
    OTPRateLimited,
)
from .models import VerificationCode
from .serializers import (
    IdentityDocumentSerializer,
    IdentityDocumentSubmitSerializer,
    OTPIssuedSerializer,
    OTPVerifySerializer,
)
from .services import (
    IdentityVerificationError,
    IdentityVerificationService,
    VerificationCodeService,
)


class SendEmailOTPView(APIView):
    """
    Step 1 of email verification: email a one-time code to the current user.
    Returns: { "success": true, "expires_at": "...", "resend_after": 60 }
    """

    permission_classes = [IsAuthenticated]
    throttle_classes = [OTPRateThrottle]

    @extend_schema(request=None, responses={200: OTPIssuedSerializer, 429: OpenApiTypes.OBJECT})
    def post(self, request):
        try:
            issued = VerificationCodeService.issue(
                request.user, VerificationCode.Purpose.EMAIL_VERIFICATION
            )
        except OTPRateLimited as exc:
            response = error_response(
                {"email": exc.message},
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                code=exc.code,
                retry_after=exc.retry_after,
            )
            response["Retry-After"] = str(exc.retry_after)
            return response
        except AlreadyVerified as exc:
            return error_response({"email": exc.message}, code=exc.code)
        except OTPDeliveryFailed as exc:
            return error_response(
                {"email": exc.message},
                status_code=status.HTTP_502_BAD_GATEWAY,
                code=exc.code,
            )

        return success_response(
            {
                "expires_at": issued.expires_at,
                "resend_after": settings.OTP_RESEND_COOLDOWN_SECONDS,
            }
        )


class VerifyEmailOTPView(APIView):
    """
    Step 2 of email verification: check the submitted code.
    Accepts: { "otp": "123456" }
    """

    permission_classes = [IsAuthenticated]
    throttle_classes = [OTPRateThrottle]
    serializer_class = OTPVerifySerializer

    def post(self, request):
        serializer = OTPVerifySerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.errors)

        try:
            result = VerificationCodeService.validate(
                request.user,
                VerificationCode.Purpose.EMAIL_VERIFICATION,
                serializer.validated_data["otp"],
            )
        except InvalidOTP as exc:
            return error_response(
                {"otp": exc.message},
                code=exc.code,
                remaining_attempts=exc.remaining_attempts,
            )
        except OTPError as exc:
            return error_response({"otp": exc.message}, code=exc.code)

        return success_response(
            {
                "email_verified_at": result.verified_at,
                "already_verified": result.already_verified,
            }
        )


class SubmitIdentityDocumentView(APIView):
    """Upload an identity document for staff review."""

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]
    serializer_class = IdentityDocumentSubmitSerializer

    def post(self, request):
        serializer = IdentityDocumentSubmitSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.errors)

        try:
            submission = IdentityVerificationService.submit(
                request.user, serializer.validated_data["document"]
            )
        except IdentityVerificationError as exc:
            return error_response({"document": str(exc)})

        return success_response(
            {"submission": IdentityDocumentSerializer(submission).data},
            status_code=status.HTTP_201_CREATED,
        )
