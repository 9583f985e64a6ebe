from rest_framework.permissions import BasePermission


class IsAdminUser(BasePermission):
    """Moderation endpoints are open to staff and superusers only."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_staff or user.is_superuser))
