import logging

from django.db import models, transaction
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework.generics import ListAPIView
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from posts.models import Comment, Post
from project.responses import error_response, success_response
from verification.models import IdentityDocument
from verification.serializers import IdentityDocumentSerializer
from verification.services import IdentityVerificationError, IdentityVerificationService

from .models import AdminAuditLog
from .permissions import IsAdminUser
from .serializers import (
    AdminAuditLogSerializer,
    ModerationRequestSerializer,
    ReviewRequestSerializer,
)

logger = logging.getLogger(__name__)


def client_ip(request):
    """First hop of X-Forwarded-For when behind the proxy, else the socket address."""
    chain = request.META.get("HTTP_X_FORWARDED_FOR", "")
    first_hop = chain.split(",")[0].strip()
    return first_hop or request.META.get("REMOTE_ADDR")


def log_admin_action(admin, action, request=None, target_user=None, details=None):
    """Writes one audit row. Usernames are copied so the row outlives the accounts."""
    return AdminAuditLog.objects.create(
        admin=admin,
        admin_username=getattr(admin, "username", "system"),
        action=action,
        target_user=target_user,
        target_username=getattr(target_user, "username", ""),
        details=details or {},
        actor_ip=client_ip(request) if request is not None else None,
    )


class PendingVerificationListView(APIView):
    """Identity documents waiting for review, oldest first."""

    permission_classes = [IsAdminUser]
    serializer_class = IdentityDocumentSerializer

    def get(self, request):
        pending = (
            IdentityDocument.objects.filter(status=IdentityDocument.Status.PENDING)
            .select_related("user", "reviewed_by")
            .order_by("submitted_at")
        )
        return Response(
            IdentityDocumentSerializer(pending, many=True, context={"request": request}).data
        )


class _ReviewVerificationView(APIView):
    permission_classes = [IsAdminUser]
    approve = None

    @extend_schema(
        request=ReviewRequestSerializer,
        responses={200: IdentityDocumentSerializer, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request, pk):
        submission = get_object_or_404(IdentityDocument.objects.select_related("user"), pk=pk)
        serializer = ReviewRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        note = serializer.validated_data.get("note", "")

        try:
            with transaction.atomic():
                submission = IdentityVerificationService.review(
                    submission, request.user, approve=self.approve, note=note
                )
                log_admin_action(
                    request.user,
                    "APPROVE_VERIFICATION" if self.approve else "REJECT_VERIFICATION",
                    request=request,
                    target_user=submission.user,
                    details={"submission_id": submission.pk, "note": note},
                )
        except IdentityVerificationError as exc:
            return error_response({"verification": str(exc)})

        return success_response(
            {
                "submission": IdentityDocumentSerializer(
                    submission, context={"request": request}
                ).data
            }
        )


class VerificationApproveView(_ReviewVerificationView):
    approve = True


class VerificationRejectView(_ReviewVerificationView):
    approve = False


class PostModerationView(APIView):
    """Removes any post, with its comments, likes and attachments."""

    permission_classes = [IsAdminUser]

    @extend_schema(request=ModerationRequestSerializer, responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, pk):
        post = get_object_or_404(Post.objects.select_related("user"), pk=pk)
        serializer = ModerationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            log_admin_action(
                request.user,
                "DELETE_POST",
                request=request,
                target_user=post.user,
                details={
                    "post_id": post.pk,
                    "reason": serializer.validated_data.get("reason", ""),
                },
            )
            post.delete()

        logger.info("Admin %s removed post %s", request.user.username, pk)
        return success_response()


class CommentModerationView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(request=ModerationRequestSerializer, responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, pk):
        comment = get_object_or_404(Comment.objects.select_related("user"), pk=pk)
        serializer = ModerationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            log_admin_action(
                request.user,
                "DELETE_COMMENT",
                request=request,
                target_user=comment.user,
                details={
                    "comment_id": comment.pk,
                    "post_id": comment.post_id,
                    "reason": serializer.validated_data.get("reason", ""),
                },
            )
            comment.delete()

        return success_response()


class AuditLogPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 500

    def get_paginated_response(self, data):
        return Response(
            {
                "count": self.page.paginator.count,
                "page": self.page.number,
                "page_size": self.page.paginator.per_page,
                "total_pages": self.page.paginator.num_pages,
                "results": data,
            }
        )


class AdminAuditLogView(ListAPIView):
    """Audit trail of staff actions, newest first."""

    permission_classes = [IsAdminUser]
    serializer_class = AdminAuditLogSerializer
    pagination_class = AuditLogPagination

    # query parameter -> lookup
    filters = {
        "action": "action",
        "admin": "admin_username__icontains",
        "target": "target_username__icontains",
    }

    def get_queryset(self):
        params = self.request.query_params
        logs = AdminAuditLog.objects.order_by("-timestamp", "-id")

        lookups = {
            lookup: params[name].strip()
            for name, lookup in self.filters.items()
            if params.get(name, "").strip()
        }
        logs = logs.filter(**lookups)

        term = params.get("search", "").strip()
        if term:
            logs = logs.filter(
                models.Q(action__icontains=term)
                | models.Q(admin_username__icontains=term)
                | models.Q(target_username__icontains=term)
            )
        return logs

    @extend_schema(
        parameters=[
            OpenApiParameter(name, str, OpenApiParameter.QUERY)
            for name in ("action", "admin", "target", "search")
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
