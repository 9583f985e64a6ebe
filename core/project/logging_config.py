import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")

_handlers = ["console", "file"] if LOG_FILE else ["console"]

# Loggers named after the apps; modules log via logging.getLogger(__name__)
APP_LOGGERS = (
    "accounts",
    "users",
    "verification",
    "notifications",
    "posts",
    "administration",
    "feed_client",
    "project",
)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {"handlers": _handlers, "level": "INFO", "propagate": False},
        "django.request": {"handlers": _handlers, "level": "ERROR", "propagate": False},
        "celery": {"handlers": _handlers, "level": "INFO", "propagate": False},
        **{
            name: {"handlers": _handlers, "level": LOG_LEVEL, "propagate": False}
            for name in APP_LOGGERS
        },
    },
}

if LOG_FILE:
    LOGGING["handlers"]["file"] = {
        "class": "logging.FileHandler",
        "filename": LOG_FILE,
        "formatter": "verbose",
    }
