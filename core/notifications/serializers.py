from rest_framework import serializers

from users.serializers import UserSummarySerializer
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)
    is_read = serializers.BooleanField(read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'type', 'sender', 'data', 'route', 'is_read', 'read_at', 'created_at']
        read_only_fields = fields


class UnreadCountSerializer(serializers.Serializer):
    unread_count = serializers.IntegerField()
