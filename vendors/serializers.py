from rest_framework import serializers

from .models import Vendor


class VendorSerializer(serializers.ModelSerializer):
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Vendor
        fields = [
            "id",
            "name",
            "location",
            "description",
            "image",
            "rating",
            "contact_email",
            "contact_phone",
            "product_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "product_count", "created_at", "updated_at"]

    def get_product_count(self, obj):
        count = getattr(obj, "published_products", None)
        if count is None:
            count = obj.products.filter(is_published=True).count()
        return count
