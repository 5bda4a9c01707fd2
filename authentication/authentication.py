"""
Request authentication for the REST API.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication


class ActiveUserJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that also rejects blocked accounts.

    A token issued before the account was blocked stays structurally valid,
    so the block status is re-checked on every request rather than only at
    login.
    """

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if getattr(user, "is_blocked", False):
            raise AuthenticationFailed(
                _("Your account has been suspended. Please contact support."),
                code="account_suspended",
            )
        return user
