from rest_framework.routers import SimpleRouter

from .views import CommentViewSet, PostViewSet

router = SimpleRouter()
router.register('posts', PostViewSet, basename='post')
router.register('comments', CommentViewSet, basename='comment')

urlpatterns = router.urls
