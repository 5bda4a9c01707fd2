"""
Product serializers for the storefront API.

Rating and review count are read-only: they only change when a review is
appended. Whatever status an admin writes is passed through the stock
projection so the stock labels can never disagree with the stock level.
"""

from rest_framework import serializers

from reviews.serializers import ReviewSerializer

from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    reviews = serializers.IntegerField(source="review_count", read_only=True)
    reviews_list = ReviewSerializer(source="reviews", many=True, read_only=True)
    vendor_name = serializers.CharField(source="vendor.name", read_only=True, default=None)
    is_in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "price",
            "unit",
            "category",
            "image",
            "description",
            "stock",
            "status",
            "rating",
            "reviews",
            "reviews_list",
            "is_seasonal",
            "is_published",
            "is_in_stock",
            "vendor",
            "vendor_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "rating",
            "created_at",
            "updated_at",
        ]

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than zero.")
        return value

    def validate(self, attrs):
        """
        Writing Draft unpublishes the product; writing any other status
        publishes it unless ``is_published`` is given explicitly.
        """
        status = attrs.get("status")
        if status is not None and "is_published" not in attrs:
            attrs["is_published"] = status != Product.Status.DRAFT
        return attrs

    def create(self, validated_data):
        product = Product(**validated_data)
        product.refresh_status()
        product.save()
        return product

    def update(self, instance, validated_data):
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.refresh_status()
        instance.save()
        return instance


class ProductListSerializer(serializers.ModelSerializer):
    """
    Lightweight serializer for product listings (no review bodies).
    """

    reviews = serializers.IntegerField(source="review_count", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "price",
            "unit",
            "category",
            "image",
            "stock",
            "status",
            "rating",
            "reviews",
            "is_seasonal",
            "vendor",
        ]
        read_only_fields = fields
