from django.contrib import admin

from .models import StoreSettings


@admin.register(StoreSettings)
class StoreSettingsAdmin(admin.ModelAdmin):
    list_display = ["site_name", "shipping_cost", "free_shipping_threshold", "tax_rate", "updated_at"]

    def has_add_permission(self, request):
        return not StoreSettings.objects.exists()
