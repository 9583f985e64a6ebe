from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification
from posts.models import Attachment, Comment, Like, Post
from posts.services import PostService


def make_user(username, verified=True):
    user = User.objects.create_user(username, f"{username}@example.com", "password")
    if verified:
        user.profile.email_verified_at = timezone.now()
        user.profile.save()
    return user


class PostCreateTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.user = make_user("amy")
        self.client.force_authenticate(user=self.user)
        self.url = reverse("post-list")

    def test_create_post_with_attachments(self):
        image = SimpleUploadedFile("cat.png", b"\x89PNG...", content_type="image/png")
        notes = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")

        response = self.client.post(
            self.url,
            {"content": "First post", "attachments": [image, notes]},
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        post = response.data["post"]
        self.assertEqual(post["content"], "First post")
        self.assertEqual(post["likes_count"], 0)
        self.assertEqual(
            [(a["file_name"], a["file_type"]) for a in post["attachments"]],
            [("cat.png", "image/png"), ("notes.txt", "text/plain")],
        )
        self.assertEqual(Attachment.objects.get(file_name="notes.txt").file_size, 5)

    def test_unverified_email_cannot_post(self):
        self.client.force_authenticate(user=make_user("ben", verified=False))

        response = self.client.post(self.url, {"content": "hi"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("content", response.data["errors"])
        self.assertFalse(Post.objects.exists())

    def test_content_too_long(self):
        response = self.client.post(self.url, {"content": "x" * 501}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("content", response.data["errors"])

    def test_empty_post(self):
        response = self.client.post(self.url, {"content": "   "}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("content", response.data["errors"])

    @override_settings(POST_ATTACHMENT_MAX_BYTES=10)
    def test_oversized_attachment_is_rejected(self):
        big = SimpleUploadedFile("big.bin", b"0" * 11)

        response = self.client.post(
            self.url, {"content": "hi", "attachments": [big]}, format="multipart"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("big.bin", str(response.data["errors"]["attachments"]))
        self.assertFalse(Post.objects.exists())

    @override_settings(POST_MAX_ATTACHMENTS=1)
    def test_too_many_attachments(self):
        files = [SimpleUploadedFile(f"{i}.txt", b"x") for i in range(2)]

        response = self.client.post(
            self.url, {"content": "hi", "attachments": files}, format="multipart"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("attachments", response.data["errors"])


class PostDeleteTests(APITestCase):
    def setUp(self):
        self.author = make_user("cleo")
        self.other = make_user("dan")
        self.post = PostService.create_post(self.author, "mine")

    def test_author_can_delete(self):
        self.client.force_authenticate(user=self.author)

        response = self.client.delete(reverse("post-detail", kwargs={"pk": self.post.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertFalse(Post.objects.exists())

    def test_other_user_cannot_delete(self):
        self.client.force_authenticate(user=self.other)

        response = self.client.delete(reverse("post-detail", kwargs={"pk": self.post.pk}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Post.objects.exists())


class LikeTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.author = make_user("eve")
        self.fan = make_user("fay")
        self.post = PostService.create_post(self.author, "like me")
        self.client.force_authenticate(user=self.fan)
        self.url = reverse("post-like", kwargs={"pk": self.post.pk})

    def test_toggle_reports_stored_membership(self):
        response = self.client.post(self.url)
        self.assertEqual(response.data, {"success": True, "liked": True, "likes_count": 1})

        response = self.client.post(self.url)
        self.assertEqual(response.data, {"success": True, "liked": False, "likes_count": 0})
        self.assertFalse(Like.objects.exists())

    def test_like_notifies_author_once_per_like(self):
        self.client.post(self.url)

        notification = Notification.objects.get(recipient=self.author)
        self.assertEqual(notification.type, Notification.Type.POST_LIKED)
        self.assertEqual(notification.sender, self.fan)
        self.assertEqual(notification.route, f"/api/posts/{self.post.pk}/")

    def test_liking_own_post_does_not_notify(self):
        self.client.force_authenticate(user=self.author)

        self.client.post(self.url)

        self.assertTrue(Like.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_feed_shows_is_liked(self):
        self.client.post(self.url)

        response = self.client.get(reverse("post-list"))

        self.assertTrue(response.data[0]["is_liked"])
        self.assertEqual(response.data[0]["likes"][0]["user_id"], self.fan.id)


class CommentTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.author = make_user("gus")
        self.commenter = make_user("hal")
        self.stranger = make_user("ida")
        self.post = PostService.create_post(self.author, "talk to me")
        self.client.force_authenticate(user=self.commenter)
        self.url = reverse("post-comment", kwargs={"pk": self.post.pk})

    def test_add_comment(self):
        response = self.client.post(self.url, {"content": "  nice  "}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["comment"]["content"], "nice")
        self.assertEqual(response.data["comment"]["user"]["username"], "hal")
        self.assertTrue(
            Notification.objects.filter(
                recipient=self.author, type=Notification.Type.POST_COMMENTED
            ).exists()
        )

    def test_comment_limits(self):
        too_long = self.client.post(self.url, {"content": "x" * 101}, format="json")
        empty = self.client.post(self.url, {"content": "   "}, format="json")

        self.assertEqual(too_long.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(empty.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(str(empty.data["errors"]["content"][0]), "Comment cannot be empty")
        self.assertFalse(Comment.objects.exists())

    def test_exactly_max_length_is_accepted(self):
        response = self.client.post(self.url, {"content": "x" * 100}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_comment_delete_permissions(self):
        comment = PostService.add_comment(self.commenter, self.post, "bye")
        url = reverse("comment-detail", kwargs={"pk": comment.pk})

        self.client.force_authenticate(user=self.stranger)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        # the post's author may remove comments under it
        self.client.force_authenticate(user=self.author)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Comment.objects.exists())

    def test_comment_author_can_delete(self):
        comment = PostService.add_comment(self.commenter, self.post, "oops")

        response = self.client.delete(reverse("comment-detail", kwargs={"pk": comment.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
