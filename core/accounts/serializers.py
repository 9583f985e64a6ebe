from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from users.serializers import UserSerializer


class AuthTokenSerializer(serializers.Serializer):
    """
    Response serializer for successful authentication.
    Bundles tokens with user data so the client can render without a /user call.
    """

    access_token = serializers.CharField(help_text="JWT access token")
    refresh_token = serializers.CharField(help_text="JWT refresh token")
    user = UserSerializer(read_only=True)


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)

    def validate_username(self, value):
        value = value.strip()
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("Username is already taken.")
        return value

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            username=validated_data["username"],
            email=validated_data["email"],
            password=validated_data["password"],
        )


class LoginSerializer(serializers.Serializer):
    """Accepts either a username or an email in ``login``."""

    login = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        login = data["login"].strip()
        username = login
        if "@" in login:
            match = User.objects.filter(email__iexact=login).first()
            if match:
                username = match.username

        user = authenticate(
            request=self.context.get("request"),
            username=username,
            password=data["password"],
        )
        if not user:
            raise serializers.ValidationError(
                {"login": "Unable to log in with provided credentials."}
            )
        if not user.is_active:
            raise serializers.ValidationError({"login": "User account is disabled."})

        data["user"] = user
        return data


class RefreshTokenSerializer(serializers.Serializer):
    """
    Request serializer for refreshing access tokens.
    The refresh token may also arrive as an HttpOnly cookie.
    """

    refresh_token = serializers.CharField(required=False)
