from rest_framework import serializers
from .models import AdminAuditLog


class AdminAuditLogSerializer(serializers.ModelSerializer):
    admin = serializers.CharField(source="admin_username", read_only=True)
    target = serializers.CharField(source="target_username", read_only=True)

    class Meta:
        model = AdminAuditLog
        fields = ["id", "admin", "action", "target", "details", "timestamp"]


class ReviewRequestSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ModerationRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
