"""
Authentication app URL declarations.

Keeping this list centralized makes it easy to audit which endpoints are public
(`AllowAny`) versus protected and lets the project urls include all account
routes with a single `include()` statement.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

router = DefaultRouter()
router.register(r"auth/addresses", views.AddressViewSet, basename="address")

urlpatterns = [
    # Public endpoints used during onboarding, login and recovery
    path("auth/register/", views.register_user, name="auth-register"),
    path("auth/login/", views.login_user, name="auth-login"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="auth-token-refresh"),
    path("auth/verify/<str:token>/", views.verify_email, name="auth-verify-email"),
    path("auth/forgot-password/", views.forgot_password, name="auth-forgot-password"),
    path("auth/reset-password/<str:token>/", views.reset_password, name="auth-reset-password"),
    # Authenticated account endpoints
    path("auth/me/", views.me, name="auth-me"),
    path("auth/resend-verification/", views.resend_verification, name="auth-resend-verification"),
    # Administrative operations guarded by the role_required decorator
    path("auth/users/", views.list_users, name="auth-users"),
    path("auth/users/<int:user_id>/", views.update_user, name="auth-user-update"),
    path("auth/users/<int:user_id>/block/", views.block_user, name="auth-user-block"),
    path("auth/users/<int:user_id>/unblock/", views.unblock_user, name="auth-user-unblock"),
    path("", include(router.urls)),
]
