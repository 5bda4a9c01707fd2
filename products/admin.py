from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["name", "category", "price", "unit", "stock", "status", "is_published", "rating", "review_count", "vendor"]
    list_filter = ["category", "status", "is_published", "is_seasonal", "vendor"]
    search_fields = ["name", "description"]
    readonly_fields = ["rating", "review_count", "created_at", "updated_at"]

    def save_model(self, request, obj, form, change):
        obj.refresh_status()
        super().save_model(request, obj, form, change)
