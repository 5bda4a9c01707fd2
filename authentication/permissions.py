"""
Role-based permissions and decorators.
"""

from functools import wraps

from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsAdmin(BasePermission):
    message = _("Only administrators can perform this action.")

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)


class IsAdminOrReadOnly(BasePermission):
    """Anyone may read; only administrators may write."""

    message = _("Only administrators can modify this resource.")

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)


def role_required(*role_names):
    """
    Decorator to enforce that request.user holds at least one of the supplied roles.
    Superusers bypass the check automatically.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(request, *args, **kwargs):
            user = request.user
            if not user or not user.is_authenticated:
                raise PermissionDenied(detail=_("Authentication credentials were not provided."))
            if not user.has_role(*role_names):
                raise PermissionDenied(detail=_("You do not have permission to perform this action."))
            return func(request, *args, **kwargs)

        return wrapper

    return decorator
