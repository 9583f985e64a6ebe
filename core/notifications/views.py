from rest_framework import viewsets, permissions, mixins
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.throttles import NotificationRateThrottle
from project.responses import success_response
from .models import Notification
from .serializers import NotificationSerializer, UnreadCountSerializer
from .services import NotificationService


class NotificationViewSet(mixins.RetrieveModelMixin,
                          mixins.ListModelMixin,
                          viewsets.GenericViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    throttle_classes = [NotificationRateThrottle]

    def get_queryset(self):
        queryset = Notification.objects.filter(
            recipient=self.request.user
        ).select_related('sender__profile')
        if self.request.query_params.get('unread') in {'1', 'true'}:
            queryset = queryset.unread()
        return queryset

    @action(detail=False, methods=['get'], url_path='unread-count',
            serializer_class=UnreadCountSerializer)
    def unread_count(self, request):
        return Response({'unread_count': NotificationService.unread_count(request.user)})

    @action(detail=False, methods=['post'], url_path='read-all')
    def mark_all_read(self, request):
        updated = NotificationService.mark_all_read(request.user)
        return success_response({'updated': updated})

    @action(detail=True, methods=['post'], url_path='read')
    def mark_read(self, request, pk=None):
        notification = NotificationService.mark_read(self.get_object())
        return success_response(
            {'notification': self.get_serializer(notification).data}
        )
