"""
Account endpoints: registration, login, email verification, password reset,
profile, the admin customer list with block/unblock, and the address book.

Security Features:
- Rate limiting on every unauthenticated write (register, login, resets)
- Blocked accounts are refused at login and on every token-bearing request
- Password reset tokens are stored hashed and expire after 10 minutes
- Audit logging for logins, resets and admin account changes
"""

from django.contrib.auth import get_user_model
from django.utils.decorators import method_decorator
from django.utils.translation import gettext_lazy as _
from django_ratelimit.decorators import ratelimit
from rest_framework import status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.exceptions import AccountSuspended, NotAuthorizedError, NotFoundError

from . import services
from .audit import log_action
from .models import Address
from .permissions import role_required
from .serializers import (
    AddressSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    ResetPasswordSerializer,
    UserRegistrationSerializer,
    UserSerializer,
)

User = get_user_model()


@api_view(["POST"])
@permission_classes([AllowAny])
@ratelimit(key="ip", rate="10/m", method="POST")
def register_user(request):
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = services.register(**serializer.validated_data)
    log_action(request, "REGISTER", "USER", user.pk, "SUCCESS", user=user)
    data = {
        "message": _("Registration successful. Please check your email to verify account."),
        "user": UserSerializer(user).data,
        "tokens": services.issue_tokens(user),
    }
    return Response(data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
@ratelimit(key="ip", rate="10/m", method="POST")
def login_user(request):
    """
    Authenticate by email and password and return a JWT pair.

    Security:
    - Failed and blocked attempts are audited with the submitted email
    - The same message is returned for an unknown email and a wrong password
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    email = serializer.validated_data["email"]
    try:
        user = services.authenticate(email, serializer.validated_data["password"])
    except AccountSuspended:
        log_action(request, "LOGIN", "USER", None, "BLOCKED", {"email": email})
        raise
    except NotAuthorizedError:
        log_action(request, "LOGIN", "USER", None, "FAILURE", {"email": email})
        raise

    log_action(request, "LOGIN", "USER", user.pk, "SUCCESS", user=user)
    data = {
        "message": _("Login successful."),
        "user": UserSerializer(user).data,
        "tokens": services.issue_tokens(user),
    }
    return Response(data, status=status.HTTP_200_OK)


@api_view(["GET", "PATCH"])
@permission_classes([IsAuthenticated])
def me(request):
    if request.method == "GET":
        return Response(UserSerializer(request.user).data, status=status.HTTP_200_OK)

    serializer = ProfileUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    user = services.update_profile(request.user, request.user, serializer.validated_data)
    return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@ratelimit(key="user", rate="3/m", method="POST")
def resend_verification(request):
    services.resend_verification(request.user)
    return Response({"message": _("Verification email sent")}, status=status.HTTP_200_OK)


@api_view(["PUT"])
@permission_classes([AllowAny])
def verify_email(request, token):
    user = services.verify_email(token)
    return Response(
        {
            "success": True,
            "message": _("Email verified successfully"),
            "user": UserSerializer(user).data,
            "tokens": services.issue_tokens(user),
        },
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
@permission_classes([AllowAny])
@ratelimit(key="ip", rate="5/m", method="POST")
def forgot_password(request):
    """Email a reset link. Only the hash of the token is kept on the account."""
    serializer = ForgotPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.request_password_reset(serializer.validated_data["email"])
    return Response({"success": True, "message": _("Email sent")}, status=status.HTTP_200_OK)


@api_view(["PUT"])
@permission_classes([AllowAny])
@ratelimit(key="ip", rate="5/m", method="PUT")
def reset_password(request, token):
    serializer = ResetPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = services.reset_password(token, serializer.validated_data["password"])
    log_action(request, "PASSWORD_RESET", "USER", user.pk, "SUCCESS", user=user)
    return Response(
        {"success": True, "tokens": services.issue_tokens(user)},
        status=status.HTTP_200_OK,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@role_required(User.Role.ADMIN)
def list_users(request):
    queryset = User.objects.prefetch_related("addresses").order_by("-created_at")
    role = request.query_params.get("role")
    if role:
        queryset = queryset.filter(role=role)
    serializer = UserSerializer(queryset, many=True)
    return Response(serializer.data, status=status.HTTP_200_OK)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
@role_required(User.Role.ADMIN)
def update_user(request, user_id):
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        return Response({"detail": _("User not found")}, status=status.HTTP_404_NOT_FOUND)
    serializer = ProfileUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    user = services.update_profile(user, request.user, serializer.validated_data)
    log_action(request, "UPDATE", "USER", user.pk, "SUCCESS", {"fields": sorted(serializer.validated_data)})
    return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@role_required(User.Role.ADMIN)
def block_user(request, user_id):
    """
    Suspend a customer account.

    Security: takes effect on the customer's next request, since tokens are
    re-checked against the account status. Admins cannot block themselves.
    """
    user = services.set_block_status(user_id, True, request.user)
    log_action(request, "BLOCK", "USER", user.pk, "SUCCESS")
    return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@role_required(User.Role.ADMIN)
def unblock_user(request, user_id):
    user = services.set_block_status(user_id, False, request.user)
    log_action(request, "UNBLOCK", "USER", user.pk, "SUCCESS")
    return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


class AddressViewSet(viewsets.ModelViewSet):
    """
    Address book of the authenticated user.

    Security Considerations:
    - Customers only ever see and edit their own addresses
    - Admins see every address and may pass ``user`` to add one on a
      customer's behalf; an unknown ``user`` is a 404
    """

    serializer_class = AddressSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["user"]

    def get_queryset(self):
        """Security: non-admins are scoped to their own rows, so other ids 404."""
        user = self.request.user
        if user.is_admin:
            return Address.objects.all()
        return Address.objects.filter(user=user)

    @method_decorator(ratelimit(key="user", rate="20/m", method="POST"))
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        owner = self.request.user
        owner_id = self.request.data.get("user")
        if owner_id and owner.is_admin:
            owner = User.objects.filter(pk=owner_id).first() if str(owner_id).isdigit() else None
            if owner is None:
                raise NotFoundError("User", owner_id)
        position = serializer.validated_data.get("position")
        if position is None:
            position = owner.addresses.count()
        serializer.save(user=owner, position=position)
