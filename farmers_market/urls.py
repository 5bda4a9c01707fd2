"""
URL configuration for the farmers market storefront.

- Catalog, vendor and order ViewSet routes
- Account endpoints from ``authentication.urls``
- Store settings
- Admin interface
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from orders.views import OrderViewSet
from products.views import ProductViewSet
from storefront.views import StoreSettingsView
from vendors.views import VendorViewSet

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"vendors", VendorViewSet, basename="vendor")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include(router.urls)),
    path("api/", include("authentication.urls")),
    path("api/settings/", StoreSettingsView.as_view(), name="store-settings"),
]
