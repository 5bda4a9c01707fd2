"""Pytest fixtures for the storefront tests."""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from authentication.models import Address, User
from products.models import Category, Product

PASSWORD = "Harvest-2024!"


@pytest.fixture(autouse=True)
def storefront_settings(settings):
    """Fast hashing, no rate limits and a clean settings cache for every test."""
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
    settings.RATELIMIT_ENABLE = False
    settings.ORDERS_REJECT_OVERSELL = False
    settings.FRONTEND_URL = "http://market.test"
    cache.clear()
    yield settings
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer(db):
    return User.objects.create_user(email="ada@example.com", password=PASSWORD, name="Ada Obi")


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(email="tunde@example.com", password=PASSWORD, name="Tunde Bakare")


@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser(email="admin@example.com", password=PASSWORD, name="Market Admin")


@pytest.fixture
def customer_client(customer):
    client = APIClient()
    client.force_authenticate(user=customer)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def make_product(db):
    """Create a product whose status is derived from its stock."""

    def _make(name="Yam tuber", price=2000, stock=10, status=Product.Status.ACTIVE, **extra):
        product = Product(
            name=name,
            price=price,
            stock=stock,
            status=status,
            is_published=extra.pop("is_published", status != Product.Status.DRAFT),
            unit=extra.pop("unit", "tuber"),
            category=extra.pop("category", Category.TUBERS),
            image=extra.pop("image", "https://cdn.market.test/yam.jpg"),
            **extra,
        )
        product.refresh_status()
        product.save()
        return product

    return _make


@pytest.fixture
def shipping_address():
    return {
        "label": "Home",
        "street": "12 Allen Avenue",
        "landmark": "Opposite the filling station",
        "city": "Ikeja",
        "lga": "Ikeja",
        "state": "Lagos",
        "phone": "+2348012345678",
        "zip": "100271",
    }


@pytest.fixture
def saved_address(customer, shipping_address):
    return Address.objects.create(user=customer, position=0, **shipping_address)
