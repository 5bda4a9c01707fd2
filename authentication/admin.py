"""
Django admin configuration for account models.
"""

from django.contrib import admin
from django.contrib.auth import get_user_model

from .models import Address, AuditLog

User = get_user_model()


class AddressInline(admin.TabularInline):
    model = Address
    extra = 0


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin interface for User model."""
    list_display = ["email", "name", "role", "status", "is_verified", "created_at"]
    list_filter = ["role", "status", "is_verified"]
    search_fields = ["email", "name", "phone"]
    readonly_fields = ["password", "verification_token", "reset_password_token", "reset_password_expires",
                       "created_at", "updated_at", "last_login", "date_joined"]
    inlines = [AddressInline]


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Admin interface for AuditLog model."""
    list_display = ["action", "resource_type", "user", "status", "ip_address", "timestamp"]
    list_filter = ["action", "resource_type", "status", "timestamp"]
    search_fields = ["user__email", "ip_address", "action", "resource_type"]
    readonly_fields = ["timestamp", "user", "action", "resource_type", "resource_id",
                       "ip_address", "user_agent", "request_path", "request_method",
                       "status", "metadata"]
    date_hierarchy = "timestamp"

    def has_add_permission(self, request):
        """Prevent manual creation of audit logs."""
        return False
