from django.db import models
from django.contrib.auth.models import User


class NotificationQuerySet(models.QuerySet):
    def unread(self):
        return self.filter(read_at__isnull=True)


class Notification(models.Model):
    """
    One entry in a user's notification ledger.

    Rows are append-only apart from `read_at`. For friend requests at most one
    row exists per (recipient, sender); see NotificationService.create.
    """

    class Type(models.TextChoices):
        FRIEND_REQUEST = "friend_request", "Friend request"
        FRIEND_REQUEST_ACCEPTED = "friend_request_accepted", "Friend request accepted"
        POST_LIKED = "post_liked", "Post liked"
        POST_COMMENTED = "post_commented", "Post commented"
        IDENTITY_VERIFIED = "identity_verified", "Identity verified"
        IDENTITY_REJECTED = "identity_rejected", "Identity rejected"

    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    sender = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='sent_notifications',
    )
    type = models.CharField(max_length=50, choices=Type.choices)
    data = models.JSONField(default=dict, blank=True)
    route = models.CharField(max_length=255, null=True, blank=True)

    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', 'read_at'], name='notification_unread_idx'),
            models.Index(fields=['recipient', 'sender', 'type'], name='notification_pair_type_idx'),
        ]

    @property
    def is_read(self):
        return self.read_at is not None

    def __str__(self):
        return f"{self.type} for {self.recipient} from {self.sender}"
