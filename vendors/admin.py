from django.contrib import admin

from .models import Vendor


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ["name", "location", "rating", "contact_email", "created_at"]
    search_fields = ["name", "location"]
