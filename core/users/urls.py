from django.urls import path
from .views import (
    CurrentUserView,
    ProfileUpdateView,
    ProfileDetailView,
    FriendRequestView,
    FriendRequestAcceptView,
    FriendRequestDeclineView,
    PendingFriendRequestsView,
    FriendListView,
    UnfriendView,
)

urlpatterns = [
    path("user/", CurrentUserView.as_view(), name="get_current_user"),
    path("user/update/", ProfileUpdateView.as_view(), name="update_profile"),
    path("users/<str:username>/", ProfileDetailView.as_view(), name="profile_detail"),
    path(
        "users/<str:username>/friend-request/",
        FriendRequestView.as_view(),
        name="friend_request",
    ),
    path("users/<str:username>/friend/", UnfriendView.as_view(), name="unfriend"),
    path("friends/", FriendListView.as_view(), name="friend_list"),
    path(
        "friend-requests/",
        PendingFriendRequestsView.as_view(),
        name="pending_friend_requests",
    ),
    path(
        "friend-requests/<int:pk>/accept/",
        FriendRequestAcceptView.as_view(),
        name="friend_request_accept",
    ),
    path(
        "friend-requests/<int:pk>/decline/",
        FriendRequestDeclineView.as_view(),
        name="friend_request_decline",
    ),
]
