"""URL routing for the reviews domain."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PGReviewListCreateView, ReviewViewSet

router = DefaultRouter()
router.register(r'reviews', ReviewViewSet, basename='review')

urlpatterns = [
    path('pgs/<int:pg_id>/reviews/', PGReviewListCreateView.as_view(), name='pg-reviews'),
    path('', include(router.urls)),
]
