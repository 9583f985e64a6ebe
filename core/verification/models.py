from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone


class VerificationCode(models.Model):
    """
    The active one-time code for a (user, purpose) pair.

    Only an HMAC of the code is stored. The unique constraint guarantees a
    single active code per pair; issuing replaces the row and successful
    validation or exhaustion deletes it.
    """

    class Purpose(models.TextChoices):
        EMAIL_VERIFICATION = "email_verification", "Email verification"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="verification_codes")
    purpose = models.CharField(max_length=32, choices=Purpose.choices)
    code_hash = models.CharField(max_length=128)
    created_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()
    attempt_count = models.PositiveSmallIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "purpose"], name="unique_active_code_per_purpose"
            ),
        ]

    def is_expired(self, now=None):
        return (now or timezone.now()) > self.expires_at

    def __str__(self):
        return f"{self.user.username} - {self.purpose} code"


def identity_document_upload_to(instance, filename):
    return f"verification/{instance.user_id}/{filename}"


class IdentityDocument(models.Model):
    """An identity document submitted for staff review."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="identity_documents")
    document = models.FileField(upload_to=identity_document_upload_to)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    submitted_at = models.DateTimeField(auto_now_add=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_identity_documents",
    )
    review_note = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["-submitted_at", "-id"]

    def __str__(self):
        return f"{self.user.username} document ({self.status})"
