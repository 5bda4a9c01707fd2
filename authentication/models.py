"""
Account models for the farmers market storefront.

Defines the custom User (email login, customer/admin role, Active/Blocked
status, email verification and password reset state), the owner's Address
book, and the AuditLog trail written by security-relevant views.
"""

import hashlib
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


def hash_token(raw_token: str) -> str:
    """SHA-256 hex digest used to store one-time tokens at rest."""
    return hashlib.sha256(raw_token.encode()).hexdigest()


class UserManager(BaseUserManager):
    """Manager for the email-keyed User model."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The email address must be set")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)
        extra_fields.setdefault("is_verified", True)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Storefront account.

    Email is the login identifier; verification is advisory.

    Security Features:
    - Passwords go through Django's hashers via ``set_password``, so only a
      one-way hash is stored
    - A ``Blocked`` status stops the account from authenticating, verified
      or not
    - Password reset tokens are stored as SHA-256 digests with an expiry
    """

    class Role(models.TextChoices):
        CUSTOMER = "customer", _("Customer")
        ADMIN = "admin", _("Admin")

    class Status(models.TextChoices):
        ACTIVE = "Active", _("Active")
        BLOCKED = "Blocked", _("Blocked")

    username = None
    first_name = None
    last_name = None

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    phone = models.CharField(
        max_length=20,
        blank=True,
        validators=[
            RegexValidator(
                regex=r"^\+?\d[\d ]{6,18}$",
                message="Enter a valid phone number (7-19 digits, optional leading +).",
            )
        ],
    )
    photo_url = models.URLField(max_length=500, blank=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.CUSTOMER)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE, db_index=True)

    is_verified = models.BooleanField(default=False)
    verification_token = models.CharField(max_length=64, blank=True, db_index=True)
    reset_password_token = models.CharField(
        max_length=64,
        blank=True,
        db_index=True,
        help_text="SHA-256 of the emailed reset token; the raw token is never stored.",
    )
    reset_password_expires = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    class Meta:
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=("email",)),
            models.Index(fields=("role", "status")),
        ]

    def __str__(self) -> str:
        return f"{self.email} ({self.name})"

    def get_full_name(self) -> str:
        return self.name

    def get_short_name(self) -> str:
        return self.name.split(" ")[0] if self.name else self.email

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == self.Role.ADMIN

    @property
    def is_blocked(self) -> bool:
        return self.status == self.Status.BLOCKED

    def has_role(self, *role_names: str) -> bool:
        """
        Check whether the user holds any of the supplied roles.
        Superusers always return True.
        """
        if self.is_superuser:
            return True
        return self.role in role_names

    def issue_verification_token(self) -> str:
        self.verification_token = secrets.token_hex(20)
        return self.verification_token

    def issue_password_reset_token(self) -> str:
        """
        Create a reset token, store its hash and expiry, and return the raw
        token for the email link.
        """
        raw_token = secrets.token_hex(20)
        self.reset_password_token = hash_token(raw_token)
        self.reset_password_expires = timezone.now() + timedelta(
            minutes=getattr(settings, "PASSWORD_RESET_TIMEOUT_MINUTES", 10)
        )
        return raw_token

    def clear_password_reset_token(self) -> None:
        self.reset_password_token = ""
        self.reset_password_expires = None


class Address(models.Model):
    """
    Entry in a user's address book.

    Orders never point at these rows; checkout copies the fields into the
    order's own shipping snapshot.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    label = models.CharField(max_length=50, help_text=_("Short name such as Home or Office"))
    street = models.CharField(max_length=255)
    landmark = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    lga = models.CharField(max_length=100, help_text=_("Local government area"))
    state = models.CharField(max_length=100)
    phone = models.CharField(max_length=20)
    zip = models.CharField(max_length=20, blank=True)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    SNAPSHOT_FIELDS = ("label", "street", "landmark", "city", "lga", "state", "phone", "zip")

    class Meta:
        ordering = ("position", "id")
        verbose_name_plural = "Addresses"

    def __str__(self) -> str:
        return f"{self.label}: {self.street}, {self.lga}, {self.state}"

    def as_snapshot(self) -> dict:
        return {field: getattr(self, field) for field in self.SNAPSHOT_FIELDS}


class AuditLog(models.Model):
    """
    Audit trail for security-relevant actions.

    Records logins, account changes, and order and catalog writes along with
    the client IP and user agent. Rows are never deleted by the application.
    """

    class Outcome(models.TextChoices):
        SUCCESS = "SUCCESS", "Success"
        FAILURE = "FAILURE", "Failure"
        BLOCKED = "BLOCKED", "Blocked"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        help_text="User who performed the action (null for anonymous events)",
    )
    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Action type: LOGIN, REGISTER, CREATE, CANCEL, UPDATE_STATUS, BLOCK, etc.",
    )
    resource_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Resource type: USER, PRODUCT, ORDER, REVIEW, VENDOR, SETTINGS",
    )
    resource_id = models.CharField(max_length=100, null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    request_path = models.CharField(max_length=500, blank=True)
    request_method = models.CharField(max_length=10, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Outcome.choices,
        default=Outcome.SUCCESS,
        db_index=True,
    )
    metadata = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["user", "timestamp"]),
            models.Index(fields=["action", "status", "timestamp"]),
            models.Index(fields=["resource_type", "resource_id"]),
        ]
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"

    def __str__(self):
        user_str = self.user.email if self.user else "Anonymous"
        return f"{self.action} on {self.resource_type} by {user_str} at {self.timestamp}"
