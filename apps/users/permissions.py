"""Role based permission classes shared by the API apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


def is_owner(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return hasattr(user, "is_owner") and user.is_owner()


class IsAdminRole(permissions.BasePermission):
    """Only platform admins."""

    message = "Admin access required"

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin(request.user)


class IsOwnerRole(permissions.BasePermission):
    """Only users registered as PG owners."""

    message = "Only PG owners can perform this action"

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_owner(request.user)


class IsOwnerOrAdminRole(permissions.BasePermission):
    message = "Only PG owners or admins can perform this action"

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_owner(request.user) or is_admin(request.user)
