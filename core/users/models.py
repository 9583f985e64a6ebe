from django.db import models
from django.db.models import Q
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver


class UserProfile(models.Model):
    """
    Extended user record holding the social profile and both verification states.

    - `email_verified_at` is set by the email code flow (null = unverified).
    - `verification_status` tracks identity document review and is only moved
      by document submission and staff review.
    """

    class VerificationStatus(models.TextChoices):
        UNVERIFIED = "unverified", "Unverified"
        PENDING = "pending", "Pending"
        VERIFIED = "verified", "Verified"

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='profile',
        help_text="The associated Django User account."
    )

    avatar = models.ImageField(upload_to='avatars/', blank=True, null=True, help_text="User's profile picture.")
    bio = models.TextField(max_length=500, blank=True, default="", help_text="Short user biography.")

    email_verified_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the user proved ownership of their email address.",
    )
    verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.UNVERIFIED,
        help_text="Identity document verification state.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'User Profile'
        verbose_name_plural = 'User Profiles'

    @property
    def is_email_verified(self):
        return self.email_verified_at is not None

    def __str__(self):
        return f"{self.user.username} ({self.verification_status})"


class FriendRequest(models.Model):
    """A directed friend request. Accepted requests form the friendship graph."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        DECLINED = "declined", "Declined"

    sender = models.ForeignKey(
        User,
        related_name='sent_friend_requests',
        on_delete=models.CASCADE
    )
    receiver = models.ForeignKey(
        User,
        related_name='received_friend_requests',
        on_delete=models.CASCADE
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ['sender', 'receiver']
        indexes = [
            models.Index(fields=['receiver', 'status'], name='friendrequest_recv_status_idx'),
        ]

    @classmethod
    def between(cls, user_a, user_b):
        """Requests in either direction between two users."""
        return cls.objects.filter(
            Q(sender=user_a, receiver=user_b) | Q(sender=user_b, receiver=user_a)
        )

    @classmethod
    def are_friends(cls, user_a, user_b):
        return cls.between(user_a, user_b).filter(status=cls.Status.ACCEPTED).exists()

    def __str__(self):
        return f"{self.sender.username} -> {self.receiver.username} ({self.status})"


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    # Every user gets a profile, including superusers created from the CLI
    if created and not hasattr(instance, 'profile'):
        UserProfile.objects.create(user=instance)
