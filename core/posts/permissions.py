from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsOwnerOrReadOnly(BasePermission):
    """Write access only for the author of the object."""

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return obj.user_id == request.user.id


class CanDeleteComment(BasePermission):
    """A comment can be removed by its author or by the author of the post."""

    def has_object_permission(self, request, view, obj):
        return request.user.id in {obj.user_id, obj.post.user_id}
