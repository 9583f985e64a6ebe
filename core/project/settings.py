import os
from pathlib import Path

import dj_database_url
from django.core.exceptions import ImproperlyConfigured
from dotenv import load_dotenv

from .logging_config import LOGGING  # noqa: F401

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env", override=False)


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in {"1", "true", "yes"}


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, default))


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise ImproperlyConfigured("SECRET_KEY is not set")

DEBUG = _env_bool("DEBUG")
ALLOWED_HOSTS = _env_list("ALLOWED_HOSTS", ["localhost", "127.0.0.1", "core"])

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "corsheaders",
    "drf_spectacular",
    "django_celery_beat",
    "django_celery_results",
    # Local
    "accounts",
    "users",
    "verification",
    "posts",
    "notifications",
    "administration",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "project.urls"
WSGI_APPLICATION = "project.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

# Database: DATABASE_URL, or the discrete DB_* variables
_DB_VARS = ("DB_NAME", "DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT")

if os.getenv("DATABASE_URL"):
    DATABASES = {"default": dj_database_url.config(conn_max_age=600)}
else:
    missing = [name for name in _DB_VARS if not os.getenv(name)]
    if missing:
        raise ImproperlyConfigured(
            f"Set DATABASE_URL or the database variables: {', '.join(missing)} missing"
        )
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DB_NAME"),
            "USER": os.getenv("DB_USER"),
            "PASSWORD": os.getenv("DB_PASSWORD"),
            "HOST": os.getenv("DB_HOST"),
            "PORT": os.getenv("DB_PORT"),
            "CONN_MAX_AGE": 600,
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": f"django.contrib.auth.password_validation.{name}"}
    for name in (
        "UserAttributeSimilarityValidator",
        "MinimumLengthValidator",
        "CommonPasswordValidator",
        "NumericPasswordValidator",
    )
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
MEDIA_URL = "/media/"
MEDIA_ROOT = os.path.join(BASE_DIR, "media")

# Prefix for media URLs built outside a request
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
        # db 0 is the celery broker
        "OPTIONS": {"db": 1},
        "KEY_PREFIX": "social",
        "TIMEOUT": 300,
    }
}

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
CORS_ALLOWED_ORIGINS = _env_list(
    "CORS_ALLOWED_ORIGINS",
    [FRONTEND_URL, "http://localhost:5173", "http://127.0.0.1:5173"],
)
CORS_ALLOW_CREDENTIALS = True
CSRF_TRUSTED_ORIGINS = _env_list(
    "CSRF_TRUSTED_ORIGINS", ["http://localhost", "http://127.0.0.1"]
)

SPECTACULAR_SETTINGS = {
    "TITLE": "Social API",
    "DESCRIPTION": "Posts, friends, notifications and account verification",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": ["accounts.authentication.JWTAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    # Named scopes are used by the throttles in accounts.throttles
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("THROTTLE_ANON_RATE", "20/minute"),
        "user": os.getenv("THROTTLE_USER_RATE", "100/minute"),
        "otp": os.getenv("THROTTLE_OTP_RATE", "5/minute"),
        "auth": os.getenv("THROTTLE_AUTH_RATE", "10/minute"),
        "notifications": os.getenv("THROTTLE_NOTIFICATIONS_RATE", "180/minute"),
        "burst": os.getenv("THROTTLE_BURST_RATE", "10/second"),
    },
}

# JWT. RS256 signs with the private key and verifies with the public one.
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "RS256")
JWT_PRIVATE_KEY = os.getenv("JWT_PRIVATE_KEY", "").replace("\\n", "\n")
JWT_PUBLIC_KEY = os.getenv("JWT_PUBLIC_KEY", "").replace("\\n", "\n")
JWT_ACCESS_TOKEN_LIFETIME = _env_int("JWT_ACCESS_TOKEN_LIFETIME", 60 * 60)
JWT_REFRESH_TOKEN_LIFETIME = _env_int("JWT_REFRESH_TOKEN_LIFETIME", 7 * 24 * 60 * 60)

JWT_COOKIE_SECURE = _env_bool("JWT_COOKIE_SECURE")
JWT_COOKIE_SAMESITE = os.getenv("JWT_COOKIE_SAMESITE", "Lax")
JWT_ACCESS_COOKIE_NAME = os.getenv("JWT_ACCESS_COOKIE_NAME", "access_token")
JWT_REFRESH_COOKIE_NAME = os.getenv("JWT_REFRESH_COOKIE_NAME", "refresh_token")

if JWT_COOKIE_SECURE:
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

# Outgoing mail goes through SES
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django_ses.SESBackend")
AWS_SES_REGION_NAME = os.getenv("AWS_SES_REGION", "us-east-1")
AWS_SES_REGION_ENDPOINT = f"email.{AWS_SES_REGION_NAME}.amazonaws.com"
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "no-reply@example.com")

# Email verification codes
OTP_CODE_LENGTH = 6
OTP_TTL_SECONDS = _env_int("OTP_TTL_SECONDS", 5 * 60)
OTP_MAX_ATTEMPTS = _env_int("OTP_MAX_ATTEMPTS", 5)
OTP_RESEND_COOLDOWN_SECONDS = _env_int("OTP_RESEND_COOLDOWN_SECONDS", 60)
OTP_REQUEST_MAX = _env_int("OTP_REQUEST_MAX", 5)
OTP_REQUEST_WINDOW_SECONDS = _env_int("OTP_REQUEST_WINDOW_SECONDS", 10 * 60)
OTP_EMAIL_ASYNC = _env_bool("OTP_EMAIL_ASYNC", default=not DEBUG)

# Feed limits
POST_MAX_CONTENT_LENGTH = 500
COMMENT_MAX_LENGTH = 100
POST_ATTACHMENT_MAX_BYTES = _env_int("POST_ATTACHMENT_MAX_BYTES", 5 * 1024 * 1024)
POST_MAX_ATTACHMENTS = _env_int("POST_MAX_ATTACHMENTS", 10)

# Notifications are also published on redis for the websocket gateway
NOTIFICATIONS_REALTIME_ENABLED = _env_bool("NOTIFICATIONS_REALTIME_ENABLED", default=True)
NOTIFICATIONS_REDIS_URL = REDIS_URL

CELERY_BROKER_URL = REDIS_URL
CELERY_RESULT_BACKEND = "django-db"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULER = "django_celery_beat.schedulers:DatabaseScheduler"
CELERY_BEAT_SCHEDULE = {
    "purge-expired-verification-codes": {
        "task": "verification.tasks.purge_expired_codes_task",
        "schedule": 10 * 60,
    },
}
