from rest_framework import status
from rest_framework.response import Response


def success_response(payload=None, status_code=status.HTTP_200_OK):
    """Envelope for successful mutations: ``{"success": true, ...payload}``."""
    body = {"success": True}
    if payload:
        body.update(payload)
    return Response(body, status=status_code)


def error_response(errors, status_code=status.HTTP_400_BAD_REQUEST, **extra):
    """
    Envelope for failed mutations.

    ``errors`` is a dict keyed by field name; a bare string is filed under
    ``non_field_errors`` so clients can always read ``errors[field]``.
    """
    if isinstance(errors, str):
        errors = {"non_field_errors": errors}
    body = {"success": False, "errors": errors}
    body.update(extra)
    return Response(body, status=status_code)
