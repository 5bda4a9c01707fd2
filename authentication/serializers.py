from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Address, User


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = [
            "id",
            "label",
            "street",
            "landmark",
            "city",
            "lga",
            "state",
            "phone",
            "zip",
            "position",
        ]
        read_only_fields = ("id",)


class UserSerializer(serializers.ModelSerializer):
    addresses = AddressSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "phone",
            "photo_url",
            "role",
            "status",
            "is_verified",
            "addresses",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Validated against Django's password validators.",
    )

    def validate_email(self, value: str) -> str:
        return value.lower()


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    photo_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    password = serializers.CharField(required=False, write_only=True, style={"input_type": "password"})
    status = serializers.ChoiceField(choices=User.Status.choices, required=False)

    def validate_email(self, value: str) -> str:
        return value.lower()


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, style={"input_type": "password"})

    def validate_password(self, value):
        if not value:
            raise serializers.ValidationError(_("Password is required."))
        return value
