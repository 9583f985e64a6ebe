from django.db.models.signals import post_save
from django.dispatch import receiver
from django.urls import reverse

from posts.models import Comment, Like
from .models import Notification
from .services import NotificationService


@receiver(post_save, sender=Like)
def create_like_notification(sender, instance, created, **kwargs):
    _ = sender, kwargs
    if not created:
        return
    # Self-likes are dropped by the service
    NotificationService.create(
        recipient=instance.post.user,
        sender=instance.user,
        type=Notification.Type.POST_LIKED,
        data={"post_id": instance.post_id},
        route=reverse("post-detail", kwargs={"pk": instance.post_id}),
    )


@receiver(post_save, sender=Comment)
def create_comment_notification(sender, instance, created, **kwargs):
    _ = sender, kwargs
    if not created:
        return
    NotificationService.create(
        recipient=instance.post.user,
        sender=instance.user,
        type=Notification.Type.POST_COMMENTED,
        data={
            "post_id": instance.post_id,
            "comment_id": instance.pk,
            "excerpt": instance.content[:50],
        },
        route=reverse("post-detail", kwargs={"pk": instance.post_id}),
    )
