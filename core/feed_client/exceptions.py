class FeedClientError(Exception):
    """Base class for errors raised by the feed client."""


class ValidationError(FeedClientError):
    """Input rejected locally before any request was sent."""

    def __init__(self, errors):
        self.errors = errors
        super().__init__(errors)


class NetworkFailure(FeedClientError):
    """The request never produced a usable answer (transport error or 5xx)."""

    def __init__(self, message="Network error. Please try again.", status_code=None):
        self.status_code = status_code
        super().__init__(message)


class ApiError(FeedClientError):
    """
    The server answered with a 4xx.

    ``errors`` is the field-keyed map from the response body; ``code`` and
    ``retry_after`` are copied from the body when the server sends them, and
    ``body`` keeps the rest of it.
    """

    def __init__(self, errors, status_code, code=None, retry_after=None, body=None):
        self.errors = errors
        self.status_code = status_code
        self.code = code
        self.retry_after = retry_after
        self.body = body or {}
        super().__init__(errors)

    def first_message(self, *fields):
        """The first message for the given fields, or for any field if none are named."""
        for key in fields or tuple(self.errors):
            value = self.errors.get(key)
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            if value:
                return str(value)
        return None
