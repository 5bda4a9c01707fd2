from rest_framework import serializers

from .models import StoreSettings


class StoreSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreSettings
        fields = [
            "shipping_cost",
            "free_shipping_threshold",
            "tax_rate",
            "site_name",
            "support_email",
            "contact_phone",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]
