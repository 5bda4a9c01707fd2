"""
Vendor ViewSet: public directory, admin-only writes.
"""

from django.db.models import Count, Q
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import filters, viewsets

from authentication.audit import log_action
from authentication.permissions import IsAdminOrReadOnly

from .models import Vendor
from .serializers import VendorSerializer


class VendorViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the vendor directory.

    Security Features:
    - Anyone may browse vendors
    - Only admins create, edit or remove them
    - Product counts only include published products
    """

    queryset = Vendor.objects.annotate(
        published_products=Count("products", filter=Q(products__is_published=True))
    )
    serializer_class = VendorSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "location", "description"]
    ordering_fields = ["name", "rating", "created_at"]

    @method_decorator(ratelimit(key="user", rate="20/m", method="POST"))
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        vendor = serializer.save()
        log_action(self.request, "CREATE", "VENDOR", vendor.pk, "SUCCESS")

    def perform_update(self, serializer):
        vendor = serializer.save()
        log_action(self.request, "UPDATE", "VENDOR", vendor.pk, "SUCCESS")

    def perform_destroy(self, instance):
        """Products of a removed vendor stay in the catalog without one."""
        log_action(self.request, "DELETE", "VENDOR", instance.pk, "SUCCESS", {"name": instance.name})
        instance.delete()
