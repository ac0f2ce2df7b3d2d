"""URL configuration for PG Stay.

Every API app is mounted under ``api/``. The Django admin site lives at
``django-admin/`` because ``api/admin/`` belongs to the backoffice API.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore

urlpatterns = [
    path('django-admin/', admin.site.urls),
    path('api/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/users/', include('apps.users.urls')),
    path('api/pgs/', include('apps.listings.urls')),
    path('api/bookings/', include('apps.bookings.urls')),
    path('api/payments/', include('apps.payments.urls')),
    path('api/admin/', include('apps.backoffice.urls')),
    # Nested ``pgs/<id>/reviews/`` plus ``reviews/<id>/``
    path('api/', include('apps.reviews.urls')),
]
