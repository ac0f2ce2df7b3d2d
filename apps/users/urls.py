"""URL declarations for the users app."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import ChangePasswordView, ProfileView

urlpatterns = [
    path('profile/', ProfileView.as_view(), name='user-profile'),
    path('change-password/', ChangePasswordView.as_view(), name='user-change-password'),
]
