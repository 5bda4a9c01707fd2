"""
Review serializers for the storefront API.
"""

from rest_framework import serializers

from .models import Review
from .services import MAX_RATING, MIN_RATING


class ReviewSerializer(serializers.ModelSerializer):
    class Meta:
        model = Review
        fields = [
            "id",
            "user_name",
            "rating",
            "comment",
            "date",
        ]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    """
    Input for a new review. ``user_name`` defaults to the reviewer's account
    name when omitted.
    """

    user_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    rating = serializers.IntegerField(min_value=MIN_RATING, max_value=MAX_RATING)
    comment = serializers.CharField()
