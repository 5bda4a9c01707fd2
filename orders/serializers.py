"""
Order serializers.

Orders are read-only over the API once placed. ``OrderCreateSerializer``
only validates the checkout payload; prices, totals and snapshots are
produced by ``orders.services.place_order``.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Order, OrderItem, OrderStatus, ShippingAddress


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product", "name", "image", "unit", "price", "quantity", "line_total"]
        read_only_fields = fields


class ShippingAddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingAddress
        fields = ["label", "street", "landmark", "city", "lga", "state", "phone", "zip"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    shipping_address = ShippingAddressSerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "date",
            "status",
            "customer",
            "customer_name",
            "customer_email",
            "payment_method",
            "items",
            "shipping_address",
            "subtotal",
            "shipping_cost",
            "tax_amount",
            "total",
            "created_at",
            "updated_at",
            "shipped_at",
            "delivered_at",
        ]
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    """
    Checkout payload. The delivery address is either given inline or picked
    from the customer's address book with ``address_id``.
    """

    items = OrderLineSerializer(many=True, allow_empty=True)
    payment_method = serializers.CharField(max_length=50)
    shipping_address = ShippingAddressSerializer(required=False)
    address_id = serializers.IntegerField(required=False)
    customer_name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get("shipping_address") and attrs.get("address_id") is None:
            raise serializers.ValidationError(
                {"shipping_address": _("A shipping address or address_id is required.")}
            )
        return attrs


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        if value not in OrderStatus.values:
            raise serializers.ValidationError(
                _("Status must be one of: %(choices)s") % {"choices": ", ".join(OrderStatus.values)}
            )
        return value
