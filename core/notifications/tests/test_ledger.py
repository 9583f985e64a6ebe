from unittest.mock import MagicMock, patch

import redis
from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification
from notifications.services import NotificationService
from notifications.utils import notify_via_ws


class NotificationServiceTests(TestCase):
    def setUp(self):
        self.recipient = User.objects.create_user("rita", "rita@example.com", "password")
        self.sender = User.objects.create_user("stan", "stan@example.com", "password")
        self.other = User.objects.create_user("olga", "olga@example.com", "password")

    def test_friend_request_keeps_one_row_per_pair(self):
        for _ in range(3):
            NotificationService.create(
                recipient=self.recipient,
                sender=self.sender,
                type=Notification.Type.FRIEND_REQUEST,
                data={"friend_request_id": 1},
            )
        NotificationService.create(
            recipient=self.recipient,
            sender=self.other,
            type=Notification.Type.FRIEND_REQUEST,
        )

        self.assertEqual(
            Notification.objects.filter(
                recipient=self.recipient,
                sender=self.sender,
                type=Notification.Type.FRIEND_REQUEST,
            ).count(),
            1,
        )
        self.assertEqual(Notification.objects.filter(recipient=self.recipient).count(), 2)

    def test_other_types_are_not_deduplicated(self):
        for _ in range(2):
            NotificationService.create(
                recipient=self.recipient,
                sender=self.sender,
                type=Notification.Type.POST_LIKED,
                data={"post_id": 1},
            )

        self.assertEqual(Notification.objects.count(), 2)

    def test_self_notification_is_skipped(self):
        result = NotificationService.create(
            recipient=self.recipient,
            sender=self.recipient,
            type=Notification.Type.POST_LIKED,
        )

        self.assertIsNone(result)
        self.assertFalse(Notification.objects.exists())

    def test_mark_read_is_idempotent(self):
        notification = NotificationService.create(
            recipient=self.recipient, sender=self.sender, type=Notification.Type.POST_LIKED
        )

        NotificationService.mark_read(notification)
        first_read_at = notification.read_at
        NotificationService.mark_read(notification)
        notification.refresh_from_db()

        self.assertIsNotNone(first_read_at)
        self.assertEqual(notification.read_at, first_read_at)

    def test_unread_count_and_mark_all(self):
        for _ in range(3):
            NotificationService.create(
                recipient=self.recipient, sender=self.sender, type=Notification.Type.POST_LIKED
            )
        self.assertEqual(NotificationService.unread_count(self.recipient), 3)

        NotificationService.mark_read(Notification.objects.first())
        self.assertEqual(NotificationService.unread_count(self.recipient), 2)

        self.assertEqual(NotificationService.mark_all_read(self.recipient), 2)
        self.assertEqual(NotificationService.unread_count(self.recipient), 0)

    def test_realtime_push_after_commit(self):
        with patch("notifications.services.notify_via_ws") as push:
            with self.captureOnCommitCallbacks(execute=True):
                notification = NotificationService.create(
                    recipient=self.recipient,
                    sender=self.sender,
                    type=Notification.Type.FRIEND_REQUEST,
                )

        push.assert_called_once()
        user_id, payload = push.call_args[0]
        self.assertEqual(user_id, self.recipient.pk)
        self.assertEqual(payload["id"], notification.pk)
        self.assertEqual(payload["notification_type"], "friend_request")


class NotifyViaWsTests(TestCase):
    def test_disabled_does_nothing(self):
        self.assertFalse(notify_via_ws(1, {"type": "notification"}))

    @override_settings(NOTIFICATIONS_REALTIME_ENABLED=True)
    def test_publishes_to_user_channel(self):
        client = MagicMock()
        with patch("notifications.utils._get_redis_client", return_value=client):
            self.assertTrue(notify_via_ws(7, {"type": "notification"}))

        channel, _ = client.publish.call_args[0]
        self.assertEqual(channel, "notifications_7")

    @override_settings(NOTIFICATIONS_REALTIME_ENABLED=True)
    def test_redis_errors_are_not_raised(self):
        client = MagicMock()
        client.publish.side_effect = redis.ConnectionError("down")
        with patch("notifications.utils._get_redis_client", return_value=client):
            self.assertFalse(notify_via_ws(7, {"type": "notification"}))


class NotificationViewTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user("nina", "nina@example.com", "password")
        self.sender = User.objects.create_user("oleg", "oleg@example.com", "password")
        self.client.force_authenticate(user=self.user)
        self.first = NotificationService.create(
            recipient=self.user, sender=self.sender, type=Notification.Type.POST_LIKED
        )
        self.second = NotificationService.create(
            recipient=self.user, sender=self.sender, type=Notification.Type.POST_COMMENTED
        )
        # someone else's notification must never show up
        NotificationService.create(
            recipient=self.sender, sender=self.user, type=Notification.Type.POST_LIKED
        )

    def test_list_only_own_newest_first(self):
        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n["id"] for n in response.data], [self.second.id, self.first.id])
        self.assertEqual(response.data[0]["sender"]["username"], "oleg")

    def test_unread_count(self):
        response = self.client.get(reverse("notification-unread-count"))

        self.assertEqual(response.data["unread_count"], 2)

    def test_mark_read_twice(self):
        url = reverse("notification-mark-read", kwargs={"pk": self.first.pk})

        first = self.client.post(url)
        second = self.client.post(url)

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(
            first.data["notification"]["read_at"], second.data["notification"]["read_at"]
        )
        response = self.client.get(reverse("notification-list"), {"unread": "1"})
        self.assertEqual([n["id"] for n in response.data], [self.second.id])

    def test_mark_all_read(self):
        response = self.client.post(reverse("notification-mark-all-read"))

        self.assertEqual(response.data["updated"], 2)
        self.assertEqual(NotificationService.unread_count(self.user), 0)

    def test_cannot_read_others_notification(self):
        foreign = Notification.objects.get(recipient=self.sender)

        response = self.client.post(reverse("notification-mark-read", kwargs={"pk": foreign.pk}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
