from django.conf import settings
from rest_framework import serializers

from .models import IdentityDocument


class OTPVerifySerializer(serializers.Serializer):
    """Serializer for verifying an email code."""
    otp = serializers.RegexField(
        r"^\d+$",
        min_length=settings.OTP_CODE_LENGTH,
        max_length=settings.OTP_CODE_LENGTH,
        error_messages={"invalid": "The code must contain digits only."},
    )


class OTPIssuedSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    expires_at = serializers.DateTimeField()
    resend_after = serializers.IntegerField(help_text="Seconds until a new code may be requested.")


class IdentityDocumentSubmitSerializer(serializers.Serializer):
    document = serializers.FileField()

    def validate_document(self, document):
        if document.size > settings.POST_ATTACHMENT_MAX_BYTES:
            limit_mb = settings.POST_ATTACHMENT_MAX_BYTES // (1024 * 1024)
            raise serializers.ValidationError(f"The document must be smaller than {limit_mb} MB.")
        return document


class IdentityDocumentSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    reviewed_by = serializers.CharField(source="reviewed_by.username", read_only=True, default=None)

    class Meta:
        model = IdentityDocument
        fields = [
            "id",
            "username",
            "status",
            "submitted_at",
            "reviewed_at",
            "reviewed_by",
            "review_note",
        ]
        read_only_fields = fields
