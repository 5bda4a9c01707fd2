from django.contrib import admin

from .models import Order, OrderItem, ShippingAddress


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ["product", "name", "image", "unit", "price", "quantity"]
    can_delete = False


class ShippingAddressInline(admin.StackedInline):
    model = ShippingAddress
    extra = 0
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["id", "customer_email", "status", "total", "payment_method", "date"]
    list_filter = ["status", "payment_method", "date"]
    search_fields = ["id", "customer_email", "customer_name"]
    readonly_fields = ["subtotal", "shipping_cost", "tax_amount", "total", "created_at", "updated_at"]
    inlines = [OrderItemInline, ShippingAddressInline]
