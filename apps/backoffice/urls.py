"""URL routing for admin endpoints, mounted under ``api/admin/``."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AdminBookingViewSet, AdminPGViewSet, AdminUserViewSet, DashboardView

router = DefaultRouter()
router.register(r'pgs', AdminPGViewSet, basename='admin-pg')
router.register(r'users', AdminUserViewSet, basename='admin-user')
router.register(r'bookings', AdminBookingViewSet, basename='admin-booking')

urlpatterns = [
    path('dashboard/', DashboardView.as_view(), name='admin-dashboard'),
    path('', include(router.urls)),
]
