from django.contrib.auth.models import User
from django.db import IntegrityError
from django.shortcuts import get_object_or_404
from django.utils.decorators import method_decorator
from django.views.decorators.cache import never_cache
from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from project.responses import error_response, success_response
from .models import FriendRequest
from .serializers import (
    FriendRequestSerializer,
    ProfileUpdateSerializer,
    PublicUserSerializer,
    UserSerializer,
    UserSummarySerializer,
)
from .services import FriendService, FriendshipError


@method_decorator(never_cache, name="dispatch")
class CurrentUserView(APIView):
    """The authenticated user's account, profile and friend count."""

    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    def get(self, request):
        return Response(UserSerializer(request.user, context={"request": request}).data)


class ProfileUpdateView(APIView):
    """Updates the authenticated user's names, bio and avatar."""

    permission_classes = [IsAuthenticated]
    serializer_class = ProfileUpdateSerializer

    @extend_schema(request=ProfileUpdateSerializer, responses={200: UserSerializer})
    def patch(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response(serializer.errors)
        try:
            user = serializer.save()
        except IntegrityError:
            # lost a race for the same username
            return error_response({"username": "Username is already taken."})

        return success_response(
            {"user": UserSerializer(user, context={"request": request}).data}
        )


class ProfileDetailView(APIView):
    """Public profile of an active user, with friendship state for the viewer."""

    permission_classes = [AllowAny]
    serializer_class = PublicUserSerializer

    @extend_schema(responses={200: PublicUserSerializer, 404: OpenApiTypes.OBJECT})
    def get(self, request, username):
        target = get_object_or_404(
            User.objects.select_related("profile"), username=username, is_active=True
        )
        return Response(PublicUserSerializer(target, context={"request": request}).data)


class FriendRequestView(APIView):
    """
    POST sends (or re-sends) a friend request to `username`.
    DELETE withdraws my pending request to `username`.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request, username):
        target = get_object_or_404(User, username=username, is_active=True)
        try:
            friend_request = FriendService.send_request(request.user, target)
        except FriendshipError as exc:
            return error_response({"friend_request": str(exc)})

        return success_response(
            {
                "friend_request": FriendRequestSerializer(
                    friend_request, context={"request": request}
                ).data
            },
            status_code=status.HTTP_201_CREATED,
        )

    def delete(self, request, username):
        target = get_object_or_404(User, username=username)
        if not FriendService.cancel_request(request.user, target):
            return error_response(
                {"friend_request": "No pending friend request to cancel."},
                status_code=status.HTTP_404_NOT_FOUND,
            )
        return success_response()


class _AnswerFriendRequestView(APIView):
    permission_classes = [IsAuthenticated]
    answer = None

    def post(self, request, pk):
        friend_request = get_object_or_404(
            FriendRequest.objects.select_related("sender", "receiver"),
            pk=pk,
            receiver=request.user,
        )
        try:
            friend_request = self.answer(friend_request, acting_user=request.user)
        except FriendshipError as exc:
            return error_response({"friend_request": str(exc)})

        return success_response(
            {
                "friend_request": FriendRequestSerializer(
                    friend_request, context={"request": request}
                ).data
            }
        )


class FriendRequestAcceptView(_AnswerFriendRequestView):
    """Accept a pending request addressed to me."""

    answer = staticmethod(FriendService.accept)


class FriendRequestDeclineView(_AnswerFriendRequestView):
    """Decline a pending request addressed to me."""

    answer = staticmethod(FriendService.decline)


class PendingFriendRequestsView(APIView):
    """Pending requests addressed to me, newest first."""

    permission_classes = [IsAuthenticated]
    serializer_class = FriendRequestSerializer

    def get(self, request):
        pending = (
            FriendRequest.objects.filter(
                receiver=request.user, status=FriendRequest.Status.PENDING
            )
            .select_related("sender__profile", "receiver__profile")
            .order_by("-created_at")
        )
        return Response(
            FriendRequestSerializer(pending, many=True, context={"request": request}).data
        )


class FriendListView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = UserSummarySerializer

    def get(self, request):
        friends = FriendService.friends_of(request.user)
        return Response(
            UserSummarySerializer(friends, many=True, context={"request": request}).data
        )


class UnfriendView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, username):
        target = get_object_or_404(User, username=username)
        if not FriendService.unfriend(request.user, target):
            return error_response(
                {"friend": "You are not friends with this user."},
                status_code=status.HTTP_404_NOT_FOUND,
            )
        return success_response()
