from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ["product", "user_name", "rating", "date"]
    list_filter = ["rating", "date"]
    search_fields = ["user_name", "comment", "product__name"]
    readonly_fields = ["product", "author", "user_name", "rating", "comment", "date", "created_at"]
