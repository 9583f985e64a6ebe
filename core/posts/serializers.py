from django.conf import settings
from rest_framework import serializers

from project.media import build_file_url
from users.serializers import UserSummarySerializer
from .models import Attachment, Comment, Like, Post


class AttachmentSerializer(serializers.ModelSerializer):
    file_url = serializers.SerializerMethodField()

    class Meta:
        model = Attachment
        fields = ['id', 'file_url', 'file_type', 'file_name', 'file_size']

    def get_file_url(self, obj):
        return build_file_url(obj.file, request=self.context.get('request'))


class LikeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Like
        fields = ['id', 'user_id', 'post_id']


class CommentSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'post_id', 'content', 'created_at', 'user']
        read_only_fields = fields


class PostSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    attachments = AttachmentSerializer(many=True, read_only=True)
    likes = LikeSerializer(many=True, read_only=True)
    comments = CommentSerializer(many=True, read_only=True)
    likes_count = serializers.SerializerMethodField()
    is_liked = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            'id', 'user', 'content', 'created_at', 'attachments',
            'likes', 'likes_count', 'is_liked', 'comments',
        ]
        read_only_fields = fields

    def get_likes_count(self, obj):
        # likes are prefetched by the views; len() avoids a COUNT per post
        return len(obj.likes.all())

    def get_is_liked(self, obj):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return any(like.user_id == request.user.id for like in obj.likes.all())
        return False


class PostCreateSerializer(serializers.Serializer):
    content = serializers.CharField(
        max_length=settings.POST_MAX_CONTENT_LENGTH,
        required=False,
        allow_blank=True,
        trim_whitespace=True,
    )
    attachments = serializers.ListField(
        child=serializers.FileField(),
        required=False,
        allow_empty=True,
    )

    def validate_attachments(self, files):
        if len(files) > settings.POST_MAX_ATTACHMENTS:
            raise serializers.ValidationError(
                f"A post can have at most {settings.POST_MAX_ATTACHMENTS} attachments."
            )

        limit_mb = settings.POST_ATTACHMENT_MAX_BYTES // (1024 * 1024)
        oversized = [f.name for f in files if f.size > settings.POST_ATTACHMENT_MAX_BYTES]
        if oversized:
            raise serializers.ValidationError(
                f"Files larger than {limit_mb} MB: {', '.join(oversized)}"
            )
        return files

    def validate(self, data):
        if not data.get('content') and not data.get('attachments'):
            raise serializers.ValidationError(
                {'content': 'Write something or attach a file.'}
            )
        return data


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField(
        max_length=settings.COMMENT_MAX_LENGTH,
        trim_whitespace=True,
        error_messages={'blank': 'Comment cannot be empty'},
    )
