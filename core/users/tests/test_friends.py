from django.contrib.auth.models import User
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification
from users.models import FriendRequest
from users.services import FriendService, FriendshipError


class FriendRequestTests(APITestCase):
    def setUp(self):
        self.sender = User.objects.create_user("sam", "sam@example.com", "password")
        self.receiver = User.objects.create_user("una", "una@example.com", "password")
        self.client.force_authenticate(user=self.sender)

    def _friend_request_notifications(self):
        return Notification.objects.filter(
            recipient=self.receiver,
            sender=self.sender,
            type=Notification.Type.FRIEND_REQUEST,
        )

    def test_send_request_notifies_receiver(self):
        url = reverse("friend_request", kwargs={"username": "una"})
        response = self.client.post(url)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["friend_request"]["status"], "pending")

        notification = self._friend_request_notifications().get()
        self.assertEqual(
            notification.data["friend_request_id"], response.data["friend_request"]["id"]
        )
        self.assertEqual(notification.route, "/api/users/sam/")

    def test_resending_keeps_a_single_notification(self):
        url = reverse("friend_request", kwargs={"username": "una"})
        self.client.post(url)
        self.client.post(url)
        self.client.post(url)

        self.assertEqual(self._friend_request_notifications().count(), 1)
        self.assertEqual(FriendRequest.objects.count(), 1)

    def test_resend_after_read_replaces_the_read_notification(self):
        FriendService.send_request(self.sender, self.receiver)
        first = self._friend_request_notifications().get()
        Notification.objects.filter(pk=first.pk).update(read_at=first.created_at)

        FriendService.send_request(self.sender, self.receiver)

        notifications = list(self._friend_request_notifications())
        self.assertEqual(len(notifications), 1)
        self.assertNotEqual(notifications[0].pk, first.pk)
        self.assertIsNone(notifications[0].read_at)

    def test_cancel_removes_request_and_notification(self):
        FriendService.send_request(self.sender, self.receiver)

        response = self.client.delete(reverse("friend_request", kwargs={"username": "una"}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(FriendRequest.objects.exists())
        self.assertFalse(self._friend_request_notifications().exists())

    def test_cannot_befriend_self(self):
        response = self.client.post(reverse("friend_request", kwargs={"username": "sam"}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("friend_request", response.data["errors"])

    def test_accept_notifies_sender(self):
        friend_request = FriendService.send_request(self.sender, self.receiver)
        self.client.force_authenticate(user=self.receiver)

        response = self.client.post(
            reverse("friend_request_accept", kwargs={"pk": friend_request.pk})
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(FriendRequest.are_friends(self.sender, self.receiver))
        self.assertTrue(
            Notification.objects.filter(
                recipient=self.sender,
                sender=self.receiver,
                type=Notification.Type.FRIEND_REQUEST_ACCEPTED,
            ).exists()
        )

    def test_second_accept_from_stale_copy_is_rejected(self):
        FriendService.send_request(self.sender, self.receiver)
        first = FriendRequest.objects.get(sender=self.sender, receiver=self.receiver)
        second = FriendRequest.objects.get(pk=first.pk)

        FriendService.accept(first, acting_user=self.receiver)
        with self.assertRaises(FriendshipError):
            FriendService.accept(second, acting_user=self.receiver)

        self.assertEqual(
            Notification.objects.filter(
                recipient=self.sender, type=Notification.Type.FRIEND_REQUEST_ACCEPTED
            ).count(),
            1,
        )

    def test_only_receiver_can_answer(self):
        friend_request = FriendService.send_request(self.sender, self.receiver)

        response = self.client.post(
            reverse("friend_request_accept", kwargs={"pk": friend_request.pk})
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mutual_request_becomes_friendship(self):
        FriendService.send_request(self.receiver, self.sender)

        friend_request = FriendService.send_request(self.sender, self.receiver)

        self.assertEqual(friend_request.status, FriendRequest.Status.ACCEPTED)
        self.assertEqual(FriendRequest.objects.count(), 1)

    def test_already_friends(self):
        friend_request = FriendService.send_request(self.sender, self.receiver)
        FriendService.accept(friend_request, acting_user=self.receiver)

        with self.assertRaises(FriendshipError):
            FriendService.send_request(self.sender, self.receiver)

    def test_friend_list_and_unfriend(self):
        friend_request = FriendService.send_request(self.sender, self.receiver)
        FriendService.accept(friend_request, acting_user=self.receiver)

        response = self.client.get(reverse("friend_list"))
        self.assertEqual([u["username"] for u in response.data], ["una"])

        response = self.client.delete(reverse("unfriend", kwargs={"username": "una"}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(FriendRequest.are_friends(self.sender, self.receiver))


class ProfileTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user("pia", "pia@example.com", "password")
        self.other = User.objects.create_user("quinn", "quinn@example.com", "password")
        self.client.force_authenticate(user=self.user)

    def test_profile_is_created_with_user(self):
        self.assertEqual(self.user.profile.verification_status, "unverified")
        self.assertFalse(self.user.profile.is_email_verified)

    def test_update_profile(self):
        response = self.client.patch(
            reverse("update_profile"), {"bio": "hello", "first_name": "Pia"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.profile.refresh_from_db()
        self.assertEqual(self.user.profile.bio, "hello")

    def test_update_rejects_taken_username(self):
        response = self.client.patch(
            reverse("update_profile"), {"username": "QUINN"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("username", response.data["errors"])

    def test_public_profile_shows_pending_request(self):
        FriendService.send_request(self.user, self.other)

        response = self.client.get(reverse("profile_detail", kwargs={"username": "quinn"}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["is_friend"])
        self.assertEqual(response.data["friend_request"]["direction"], "sent")
