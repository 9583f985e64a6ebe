import logging
import mimetypes

from django.db import IntegrityError, transaction

from .models import Attachment, Comment, Like, Post

logger = logging.getLogger(__name__)


class EmailNotVerified(Exception):
    """The author has not confirmed their email address yet."""


class PostService:
    @staticmethod
    def create_post(user, content, files=()):
        """
        Creates a post and stores its attachments.

        Posting is reserved for users with a verified email address.
        """
        profile = getattr(user, "profile", None)
        if profile is None or not profile.is_email_verified:
            raise EmailNotVerified("You must verify your email to create a post.")

        with transaction.atomic():
            post = Post.objects.create(user=user, content=content or "")
            for upload in files:
                content_type = getattr(upload, "content_type", None) or (
                    mimetypes.guess_type(upload.name)[0] or "application/octet-stream"
                )
                Attachment.objects.create(
                    post=post,
                    file=upload,
                    file_type=content_type,
                    file_name=upload.name,
                    file_size=upload.size,
                )

        logger.info("User %s created post %s with %s attachment(s)", user.pk, post.pk, len(files))
        return post

    @staticmethod
    def toggle_like(user, post):
        """
        Flips the user's like on ``post``.

        Returns ``(liked, likes_count)`` as stored after the toggle. A concurrent
        request that already inserted the like is treated as success.
        """
        with transaction.atomic():
            removed, _ = Like.objects.filter(user=user, post=post).delete()
            if removed:
                liked = False
            else:
                try:
                    with transaction.atomic():
                        Like.objects.create(user=user, post=post)
                except IntegrityError:
                    logger.info("Like for user %s on post %s already exists", user.pk, post.pk)
                liked = True

        return liked, Like.objects.filter(post=post).count()

    @staticmethod
    def add_comment(user, post, content):
        return Comment.objects.create(user=user, post=post, content=content)
