"""
Account service: login, registration, email verification, password reset
and admin block/unblock.

Functions raise ``core.exceptions`` errors before writing anything; the
views turn them into HTTP responses through the project exception handler.
"""

import logging

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from core.exceptions import (
    AccountSuspended,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from notifications.messages import send_password_reset, send_verification_email

from .models import User, hash_token

logger = logging.getLogger(__name__)


def issue_tokens(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


def _check_password_strength(password: str, user: User = None) -> None:
    try:
        validate_password(password, user=user)
    except DjangoValidationError as exc:
        raise ValidationError(" ".join(exc.messages)) from exc


def authenticate(email: str, password: str) -> User:
    """
    Verify credentials and return the user.

    A blocked account is rejected even with the right password. Unverified
    accounts may log in; verification is advisory only.
    """
    user = User.objects.filter(email__iexact=(email or "").strip()).first()
    if user is None or not user.check_password(password):
        raise NotAuthorizedError("Invalid email or password")
    if user.is_blocked:
        raise AccountSuspended()
    user.last_login = timezone.now()
    user.save(update_fields=["last_login"])
    return user


def register(name: str, email: str, password: str) -> User:
    """Create an unverified customer account and email a verification link."""
    email = (email or "").strip().lower()
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError("User already exists")
    _check_password_strength(password, User(email=email, name=name))

    user = User(email=email, name=name, role=User.Role.CUSTOMER, is_verified=False)
    user.set_password(password)
    token = user.issue_verification_token()
    user.save()

    send_verification_email(user, token)
    logger.info("Registered account %s", user.pk)
    return user


def resend_verification(user: User) -> None:
    if user.is_verified:
        raise ValidationError("Account already verified")
    token = user.issue_verification_token()
    user.save(update_fields=["verification_token", "updated_at"])
    send_verification_email(user, token, resend=True)


def verify_email(token: str) -> User:
    """Consume a one-time verification token."""
    user = User.objects.filter(verification_token=token).first() if token else None
    if user is None:
        raise ValidationError("Invalid or expired verification token")
    user.is_verified = True
    user.verification_token = ""
    user.save(update_fields=["is_verified", "verification_token", "updated_at"])
    return user


def request_password_reset(email: str) -> None:
    user = User.objects.filter(email__iexact=(email or "").strip()).first()
    if user is None:
        raise NotFoundError("User")
    raw_token = user.issue_password_reset_token()
    user.save(update_fields=["reset_password_token", "reset_password_expires", "updated_at"])
    send_password_reset(user, raw_token)


def reset_password(token: str, new_password: str) -> User:
    """
    Overwrite the password of the account holding an unexpired reset token
    and clear the token so it cannot be reused.
    """
    user = User.objects.filter(
        reset_password_token=hash_token(token or ""),
        reset_password_expires__gt=timezone.now(),
    ).first()
    if user is None:
        raise ValidationError("Invalid or expired token")
    _check_password_strength(new_password, user)

    user.set_password(new_password)
    user.clear_password_reset_token()
    user.save(update_fields=["password", "reset_password_token", "reset_password_expires", "updated_at"])
    return user


def update_profile(user: User, actor: User, changes: dict) -> User:
    """
    Apply profile changes made by the owner or an admin.

    ``status`` is only honoured for admins. A new password is hashed before
    it is stored.
    """
    if actor.pk != user.pk and not actor.is_admin:
        raise NotAuthorizedError("Not authorized to update this profile")

    changes = dict(changes)
    password = changes.pop("password", None)
    status = changes.pop("status", None)
    email = changes.get("email")
    if email and User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
        raise ValidationError("Email already in use")

    for field, value in changes.items():
        setattr(user, field, value)
    if password:
        _check_password_strength(password, user)
        user.set_password(password)
    if status and actor.is_admin:
        user.status = status
    user.save()
    return user


@transaction.atomic
def set_block_status(user_id, blocked: bool, actor: User) -> User:
    if not actor.is_admin:
        raise NotAuthorizedError()
    user = User.objects.select_for_update().filter(pk=user_id).first()
    if user is None:
        raise NotFoundError("User", user_id)
    if user.pk == actor.pk and blocked:
        raise ValidationError("You cannot block your own account")
    user.status = User.Status.BLOCKED if blocked else User.Status.ACTIVE
    user.save(update_fields=["status", "updated_at"])
    logger.info("User %s %s by %s", user.pk, user.status, actor.pk)
    return user
