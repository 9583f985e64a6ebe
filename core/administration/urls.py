from django.urls import path
from .views import (
    PendingVerificationListView,
    VerificationApproveView,
    VerificationRejectView,
    PostModerationView,
    CommentModerationView,
    AdminAuditLogView,
)

urlpatterns = [
    path(
        "verifications/",
        PendingVerificationListView.as_view(),
        name="admin_verification_list",
    ),
    path(
        "verifications/<int:pk>/approve/",
        VerificationApproveView.as_view(),
        name="admin_verification_approve",
    ),
    path(
        "verifications/<int:pk>/reject/",
        VerificationRejectView.as_view(),
        name="admin_verification_reject",
    ),
    path("posts/<int:pk>/", PostModerationView.as_view(), name="admin_post_delete"),
    path(
        "comments/<int:pk>/",
        CommentModerationView.as_view(),
        name="admin_comment_delete",
    ),
    path("audit-logs/", AdminAuditLogView.as_view(), name="admin_audit_logs"),
]
