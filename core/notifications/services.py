import logging

from django.db import transaction
from django.utils import timezone

from users.models import UserProfile
from .models import Notification
from .utils import notify_via_ws

logger = logging.getLogger(__name__)


class NotificationService:
    """Append / query / dedup operations on the per-user notification ledger."""

    # Types for which only the latest notification per (recipient, sender) is kept
    DEDUPLICATED_TYPES = {Notification.Type.FRIEND_REQUEST}

    @staticmethod
    def create(recipient, type, sender=None, data=None, route=None):
        """
        Appends a notification for ``recipient``.

        For deduplicated types the existing rows for (recipient, sender, type)
        are deleted first, in the same transaction. The recipient's profile row
        is locked so two concurrent creates for one pair cannot both insert.
        Returns the Notification, or None when sender and recipient are the
        same user.
        """
        if sender is not None and sender.pk == recipient.pk:
            return None

        with transaction.atomic():
            if type in NotificationService.DEDUPLICATED_TYPES:
                UserProfile.objects.select_for_update().filter(user=recipient).first()
                removed, _ = Notification.objects.filter(
                    recipient=recipient, sender=sender, type=type
                ).delete()
                if removed:
                    logger.info(
                        "Replaced %s earlier %s notification(s) for user %s",
                        removed,
                        type,
                        recipient.pk,
                    )

            notification = Notification.objects.create(
                recipient=recipient,
                sender=sender,
                type=type,
                data=data or {},
                route=route,
            )

            transaction.on_commit(
                lambda: notify_via_ws(
                    recipient.pk,
                    {
                        "type": "notification",
                        "id": notification.pk,
                        "notification_type": notification.type,
                        "sender_id": sender.pk if sender else None,
                        "data": notification.data,
                        "route": notification.route,
                    },
                )
            )

        return notification

    @staticmethod
    def remove_friend_requests(recipient, sender):
        """Deletes friend request notifications sent by ``sender`` to ``recipient``."""
        deleted, _ = Notification.objects.filter(
            recipient=recipient,
            sender=sender,
            type=Notification.Type.FRIEND_REQUEST,
        ).delete()
        return deleted

    @staticmethod
    def mark_read(notification):
        """Sets read_at once; marking an already read notification is a no-op."""
        if notification.read_at is not None:
            return notification

        now = timezone.now()
        updated = Notification.objects.filter(
            pk=notification.pk, read_at__isnull=True
        ).update(read_at=now)
        if updated:
            notification.read_at = now
        else:
            notification.refresh_from_db(fields=["read_at"])
        return notification

    @staticmethod
    def mark_all_read(user):
        return Notification.objects.filter(recipient=user).unread().update(
            read_at=timezone.now()
        )

    @staticmethod
    def unread_count(user):
        return Notification.objects.filter(recipient=user).unread().count()
