import logging

from django.conf import settings
from django.contrib.auth.models import User
from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from project.responses import error_response, success_response
from users.serializers import UserSerializer
from .serializers import (
    AuthTokenSerializer,
    LoginSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
)
from .throttles import AuthRateThrottle
from .utils import decode_token, generate_access_token, generate_tokens

logger = logging.getLogger(__name__)

INVALID_REFRESH = "Invalid or expired refresh token"


def _cookie_specs():
    return {
        "access_token": (settings.JWT_ACCESS_COOKIE_NAME, settings.JWT_ACCESS_TOKEN_LIFETIME),
        "refresh_token": (settings.JWT_REFRESH_COOKIE_NAME, settings.JWT_REFRESH_TOKEN_LIFETIME),
    }


def _set_auth_cookies(response, tokens):
    """Mirrors the tokens in HttpOnly cookies for browser clients."""
    for key, (cookie_name, max_age) in _cookie_specs().items():
        if not tokens.get(key):
            continue
        response.set_cookie(
            cookie_name,
            tokens[key],
            max_age=max_age,
            httponly=True,
            secure=settings.JWT_COOKIE_SECURE,
            samesite=settings.JWT_COOKIE_SAMESITE,
            path="/",
        )
    return response


def _clear_auth_cookies(response):
    for cookie_name, _ in _cookie_specs().values():
        response.delete_cookie(cookie_name, path="/")
    return response


def _token_response(request, user, tokens, status_code=status.HTTP_200_OK):
    response = success_response(
        {
            **tokens,
            "user": UserSerializer(user, context={"request": request}).data,
        },
        status_code=status_code,
    )
    return _set_auth_cookies(response, tokens)


class RegisterView(APIView):
    """
    Create an account with username, email and password.
    The email starts unverified; posting requires the email OTP flow first.
    """

    permission_classes = [AllowAny]
    throttle_classes = [AuthRateThrottle]
    serializer_class = RegisterSerializer

    @extend_schema(request=RegisterSerializer, responses={201: AuthTokenSerializer})
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.errors)

        user = serializer.save()
        logger.info("Registered user %s", user.username)
        return _token_response(
            request, user, generate_tokens(user), status_code=status.HTTP_201_CREATED
        )


class LoginView(APIView):
    """Log in with username or email plus password."""

    permission_classes = [AllowAny]
    throttle_classes = [AuthRateThrottle]
    serializer_class = LoginSerializer

    @extend_schema(request=LoginSerializer, responses={200: AuthTokenSerializer})
    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        if not serializer.is_valid():
            return error_response(serializer.errors)

        user = serializer.validated_data["user"]
        return _token_response(request, user, generate_tokens(user))


class RefreshTokenView(APIView):
    """Trades a refresh token (body or cookie) for a new access token."""

    permission_classes = [AllowAny]
    serializer_class = RefreshTokenSerializer

    def post(self, request):
        token = request.data.get("refresh_token") or request.COOKIES.get(
            settings.JWT_REFRESH_COOKIE_NAME
        )
        if not token:
            return error_response({"refresh_token": "Refresh token is required"})

        payload = decode_token(token) or {}
        user = None
        if payload.get("type") == "refresh":
            user = User.objects.filter(pk=payload.get("user_id")).first()
        if user is None:
            return error_response(
                {"refresh_token": INVALID_REFRESH}, status_code=status.HTTP_401_UNAUTHORIZED
            )
        if not user.is_active:
            return error_response(
                "User account is disabled.", status_code=status.HTTP_403_FORBIDDEN
            )

        return _token_response(request, user, {"access_token": generate_access_token(user)})


class LogoutView(APIView):
    """Clears the auth cookies. Bearer clients simply drop their tokens."""

    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: OpenApiTypes.OBJECT})
    def post(self, request):
        return _clear_auth_cookies(success_response({"message": "Successfully logged out"}))
