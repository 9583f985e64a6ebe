from rest_framework import serializers
from django.contrib.auth.models import User
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.db import transaction
from django.db.models import Q
from drf_spectacular.utils import extend_schema_field

from project.media import build_file_url
from .models import UserProfile, FriendRequest


class UserProfileSerializer(serializers.ModelSerializer):

    # avatar is exposed as an absolute URL
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = UserProfile
        fields = [
            "avatar_url",
            "bio",
            "email_verified_at",
            "verification_status",
            "created_at",
        ]

    def get_avatar_url(self, obj):
        return build_file_url(obj.avatar, request=self.context.get("request"))


class UserSerializer(serializers.ModelSerializer):
    """The authenticated user's own view of their account."""

    profile = serializers.SerializerMethodField()
    friends_count = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "profile",
            "friends_count",
            "is_staff",  # For Access Control (e.g. show Admin Link)
            "is_active",
        ]

    @extend_schema_field(UserProfileSerializer)
    def get_profile(self, obj):
        profile = getattr(obj, "profile", None)
        if profile is None:
            return None
        return UserProfileSerializer(profile, context=self.context).data

    @extend_schema_field(int)
    def get_friends_count(self, obj):
        return FriendRequest.objects.filter(
            Q(sender=obj) | Q(receiver=obj),
            status=FriendRequest.Status.ACCEPTED,
        ).count()


class UserSummarySerializer(serializers.Serializer):
    """Compact author block embedded in posts, comments and notifications."""

    id = serializers.IntegerField()
    username = serializers.CharField()
    name = serializers.SerializerMethodField()
    avatar_url = serializers.SerializerMethodField()
    verification_status = serializers.SerializerMethodField()

    def get_name(self, obj):
        return obj.get_full_name() or obj.username

    def get_avatar_url(self, obj):
        profile = getattr(obj, "profile", None)
        if profile is None:
            return None
        return build_file_url(profile.avatar, request=self.context.get("request"))

    def get_verification_status(self, obj):
        profile = getattr(obj, "profile", None)
        if profile is None:
            return UserProfile.VerificationStatus.UNVERIFIED
        return profile.verification_status


class PublicUserSerializer(UserSummarySerializer):
    """Public profile with the viewer's relationship to this user."""

    bio = serializers.SerializerMethodField()
    is_friend = serializers.SerializerMethodField()
    friend_request = serializers.SerializerMethodField()

    def get_bio(self, obj):
        profile = getattr(obj, "profile", None)
        return profile.bio if profile else ""

    def _viewer(self):
        request = self.context.get("request")
        if request and request.user.is_authenticated:
            return request.user
        return None

    @extend_schema_field(bool)
    def get_is_friend(self, obj):
        viewer = self._viewer()
        if viewer is None or viewer == obj:
            return False
        return FriendRequest.are_friends(viewer, obj)

    def get_friend_request(self, obj):
        """``sent`` / ``received`` for a pending request, otherwise None."""
        viewer = self._viewer()
        if viewer is None or viewer == obj:
            return None
        pending = FriendRequest.between(viewer, obj).filter(
            status=FriendRequest.Status.PENDING
        ).first()
        if pending is None:
            return None
        return {
            "id": pending.id,
            "direction": "sent" if pending.sender_id == viewer.id else "received",
        }


class FriendRequestSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)
    receiver = UserSummarySerializer(read_only=True)

    class Meta:
        model = FriendRequest
        fields = ["id", "sender", "receiver", "status", "created_at", "responded_at"]


class ProfileUpdateSerializer(serializers.Serializer):
    """Partial update of the account names and the profile. Email is not editable."""

    username = serializers.CharField(
        max_length=150, required=False, validators=[UnicodeUsernameValidator()]
    )
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True)
    avatar = serializers.ImageField(required=False)

    user_fields = ("username", "first_name", "last_name")
    profile_fields = ("bio", "avatar")

    def validate_username(self, value):
        taken = User.objects.filter(username__iexact=value).exclude(pk=self.instance.pk)
        if taken.exists():
            raise serializers.ValidationError("Username is already taken.")
        return value

    def update(self, user, validated_data):
        profile = user.profile
        for field in self.user_fields:
            if field in validated_data:
                setattr(user, field, validated_data[field])
        for field in self.profile_fields:
            if field in validated_data:
                setattr(profile, field, validated_data[field])

        with transaction.atomic():
            user.save()
            profile.save()
        return user
