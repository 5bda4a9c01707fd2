"""
Product ViewSet for the storefront API.

This module provides the catalog endpoints with the following guarantees:
- Anyone can browse published products
- Unpublished (draft) products are only visible to admins
- Catalog writes are admin-only and audited
- Customers append reviews through the nested ``reviews`` action
"""

from django.utils.decorators import method_decorator
from django_filters.rest_framework import DjangoFilterBackend
from django_ratelimit.decorators import ratelimit
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from authentication.audit import log_action
from authentication.permissions import IsAdminOrReadOnly
from reviews import services as review_services
from reviews.serializers import ReviewCreateSerializer, ReviewSerializer

from .models import Product
from .serializers import ProductListSerializer, ProductSerializer


class ProductViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the product catalog.

    Security Features:
    - Read access for authenticated and anonymous users
    - Create, update and delete restricted to admins
    - Unpublished products hidden from everyone but admins
    - Rate limiting on create and review submission
    - Audit logging for every catalog write
    """

    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["category", "vendor", "is_seasonal", "status"]
    search_fields = ["name", "description", "category"]
    ordering_fields = ["name", "price", "rating", "stock", "created_at"]
    ordering = ["-created_at"]

    def get_serializer_class(self):
        if self.action == "list":
            return ProductListSerializer
        return ProductSerializer

    def get_queryset(self):
        """
        Security: admins see every product; everyone else only sees
        products with ``is_published`` set, whatever their stock label.
        """
        queryset = Product.objects.select_related("vendor").prefetch_related("reviews")
        user = self.request.user
        if user.is_authenticated and user.is_admin:
            return queryset
        return queryset.filter(is_published=True)

    @method_decorator(ratelimit(key="user", rate="30/m", method="POST"))
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        product = serializer.save()
        log_action(self.request, "CREATE", "PRODUCT", product.pk, "SUCCESS")

    def perform_update(self, serializer):
        product = serializer.save()
        log_action(
            self.request, "UPDATE", "PRODUCT", product.pk, "SUCCESS",
            {"stock": product.stock, "status": product.status, "is_published": product.is_published},
        )

    def perform_destroy(self, instance):
        # Order line items keep their own snapshot, so history survives the delete.
        log_action(self.request, "DELETE", "PRODUCT", instance.pk, "SUCCESS", {"name": instance.name})
        instance.delete()

    @action(detail=True, methods=["get", "post"], permission_classes=[AllowAny])
    @method_decorator(ratelimit(key="user_or_ip", rate="10/m", method="POST"))
    def reviews(self, request, pk=None):
        """
        GET lists the product's reviews; POST appends one and returns the
        updated product.

        Security:
        - POST requires an authenticated user
        - Products the caller cannot see answer 404 for both methods
        - Rating range is validated before anything is written
        """
        if request.method == "GET":
            product = self.get_object()
            return Response(ReviewSerializer(product.reviews.all(), many=True).data)

        if not request.user.is_authenticated:
            self.permission_denied(request, message="Authentication credentials were not provided.")

        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        product = self.get_object()
        product = review_services.submit_review(
            product.pk,
            user_name=data.get("user_name") or request.user.name,
            rating=data["rating"],
            comment=data["comment"],
            author=request.user,
        )
        log_action(request, "CREATE", "REVIEW", product.pk, "SUCCESS", {"rating": data["rating"]})
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
