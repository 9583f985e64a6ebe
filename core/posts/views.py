from django.db.models import Prefetch
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from accounts.throttles import BurstRateThrottle
from project.responses import error_response, success_response
from .models import Comment, Post
from .permissions import CanDeleteComment, IsOwnerOrReadOnly
from .serializers import (
    CommentCreateSerializer,
    CommentSerializer,
    PostCreateSerializer,
    PostSerializer,
)
from .services import EmailNotVerified, PostService


def feed_queryset():
    return Post.objects.select_related('user__profile').prefetch_related(
        'attachments',
        'likes',
        Prefetch('comments', queryset=Comment.objects.select_related('user__profile')),
    )


class PostViewSet(mixins.ListModelMixin,
                  mixins.RetrieveModelMixin,
                  mixins.DestroyModelMixin,
                  viewsets.GenericViewSet):
    """
    Feed, post creation/deletion, likes and comments.

    Mutations answer ``{"success": ...}`` so the client can reconcile its
    optimistic state with the stored result.
    """

    serializer_class = PostSerializer
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrReadOnly]

    def get_queryset(self):
        queryset = feed_queryset()
        username = self.request.query_params.get('username')
        if username:
            queryset = queryset.filter(user__username=username)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = PostCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.errors)

        try:
            post = PostService.create_post(
                request.user,
                serializer.validated_data.get('content', ''),
                serializer.validated_data.get('attachments', []),
            )
        except EmailNotVerified as exc:
            return error_response({'content': str(exc)}, status_code=status.HTTP_403_FORBIDDEN)

        post = self.get_queryset().get(pk=post.pk)
        return success_response(
            {'post': PostSerializer(post, context={'request': request}).data},
            status_code=status.HTTP_201_CREATED,
        )

    def destroy(self, request, *args, **kwargs):
        post = self.get_object()
        post.delete()
        return success_response()

    @action(detail=True, methods=['post'], permission_classes=[permissions.IsAuthenticated],
            throttle_classes=[BurstRateThrottle])
    def like(self, request, pk=None):
        post = self.get_object()
        liked, likes_count = PostService.toggle_like(request.user, post)
        return success_response({'liked': liked, 'likes_count': likes_count})

    @action(detail=True, methods=['post'], permission_classes=[permissions.IsAuthenticated],
            throttle_classes=[BurstRateThrottle])
    def comment(self, request, pk=None):
        post = self.get_object()
        serializer = CommentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.errors)

        comment = PostService.add_comment(
            request.user, post, serializer.validated_data['content']
        )
        return success_response(
            {'comment': CommentSerializer(comment, context={'request': request}).data},
            status_code=status.HTTP_201_CREATED,
        )


class CommentViewSet(mixins.DestroyModelMixin, viewsets.GenericViewSet):
    queryset = Comment.objects.select_related('post')
    serializer_class = CommentSerializer
    permission_classes = [permissions.IsAuthenticated, CanDeleteComment]

    def destroy(self, request, *args, **kwargs):
        comment = self.get_object()
        comment.delete()
        return success_response()
