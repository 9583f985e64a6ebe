import logging

from django.contrib.auth.models import User
from django.db import transaction
from django.urls import reverse
from django.utils import timezone

from notifications.models import Notification
from notifications.services import NotificationService
from .models import FriendRequest

logger = logging.getLogger(__name__)


class FriendshipError(Exception):
    """Raised for friend request operations that are not allowed."""


class FriendService:
    @staticmethod
    def send_request(sender, receiver):
        """
        Creates (or re-opens) a pending request from ``sender`` to ``receiver``.

        Sending again while a request is pending re-notifies the receiver; the
        ledger keeps a single friend_request notification per pair.
        Returns the FriendRequest.
        """
        if sender == receiver:
            raise FriendshipError("You cannot send a friend request to yourself.")

        with transaction.atomic():
            if FriendRequest.are_friends(sender, receiver):
                raise FriendshipError("You are already friends.")

            reverse_request = (
                FriendRequest.objects.select_for_update()
                .filter(sender=receiver, receiver=sender, status=FriendRequest.Status.PENDING)
                .first()
            )
            if reverse_request is not None:
                # Both sides asked: treat it as acceptance of the older request
                return FriendService.accept(reverse_request, acting_user=sender)

            friend_request, created = FriendRequest.objects.select_for_update().get_or_create(
                sender=sender, receiver=receiver
            )
            if not created and friend_request.status != FriendRequest.Status.PENDING:
                friend_request.status = FriendRequest.Status.PENDING
                friend_request.responded_at = None
                friend_request.save(update_fields=["status", "responded_at"])

        NotificationService.create(
            recipient=receiver,
            sender=sender,
            type=Notification.Type.FRIEND_REQUEST,
            data={"friend_request_id": friend_request.id},
            route=reverse("profile_detail", kwargs={"username": sender.username}),
        )
        logger.info("Friend request %s -> %s", sender.username, receiver.username)
        return friend_request

    @staticmethod
    def cancel_request(sender, receiver):
        """Withdraws a pending request. Returns True if one was removed."""
        with transaction.atomic():
            deleted, _ = FriendRequest.objects.filter(
                sender=sender, receiver=receiver, status=FriendRequest.Status.PENDING
            ).delete()
            if deleted:
                NotificationService.remove_friend_requests(receiver, sender)
        return bool(deleted)

    @staticmethod
    def _answer(friend_request, acting_user, new_status):
        """Moves a pending request to ``new_status`` under a row lock."""
        friend_request = FriendRequest.objects.select_for_update().get(pk=friend_request.pk)
        if friend_request.receiver_id != acting_user.id:
            raise FriendshipError("Only the receiver can answer this request.")
        if friend_request.status != FriendRequest.Status.PENDING:
            raise FriendshipError("This friend request is no longer pending.")

        friend_request.status = new_status
        friend_request.responded_at = timezone.now()
        friend_request.save(update_fields=["status", "responded_at"])
        return friend_request

    @staticmethod
    def accept(friend_request, acting_user):
        with transaction.atomic():
            friend_request = FriendService._answer(
                friend_request, acting_user, FriendRequest.Status.ACCEPTED
            )
            NotificationService.create(
                recipient=friend_request.sender,
                sender=acting_user,
                type=Notification.Type.FRIEND_REQUEST_ACCEPTED,
                data={"friend_request_id": friend_request.id},
                route=reverse("profile_detail", kwargs={"username": acting_user.username}),
            )
        return friend_request

    @staticmethod
    def decline(friend_request, acting_user):
        with transaction.atomic():
            return FriendService._answer(
                friend_request, acting_user, FriendRequest.Status.DECLINED
            )

    @staticmethod
    def unfriend(user, other):
        deleted, _ = (
            FriendRequest.between(user, other)
            .filter(status=FriendRequest.Status.ACCEPTED)
            .delete()
        )
        return bool(deleted)

    @staticmethod
    def friends_of(user):
        sent = FriendRequest.objects.filter(
            sender=user, status=FriendRequest.Status.ACCEPTED
        ).values_list("receiver_id", flat=True)
        received = FriendRequest.objects.filter(
            receiver=user, status=FriendRequest.Status.ACCEPTED
        ).values_list("sender_id", flat=True)
        return (
            User.objects.filter(id__in=set(sent) | set(received))
            .select_related("profile")
            .order_by("username")
        )
