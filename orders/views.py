"""
Order ViewSet for the storefront API.

Customers place, list and cancel their own orders; admins see every order
and move it through fulfilment. Tracking by order id is public and returns
only the minimal projection from ``services.track_order``.

Security Features:
- Totals are computed on the server; client-sent prices and totals are ignored
- Order ids are random UUIDs, so the public tracking URL cannot be enumerated
- Every placement, cancellation and status change is audited
"""

from django.utils.decorators import method_decorator
from django_filters.rest_framework import DjangoFilterBackend
from django_ratelimit.decorators import ratelimit
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from authentication.audit import log_action
from authentication.permissions import IsAdmin
from core.exceptions import StorefrontError

from . import services
from .serializers import OrderCreateSerializer, OrderSerializer, OrderStatusUpdateSerializer


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for orders.

    Security Features:
    - Authentication required for everything except ``track``
    - Customers are scoped to their own orders; other ids answer 404
    - Status changes restricted to admins
    - Separate per-user and per-IP rate limits on checkout
    """

    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "customer"]

    def get_queryset(self):
        """Security: admins see every order, customers only their own."""
        return services.list_orders(self.request.user)

    @method_decorator(ratelimit(key="user", rate="5/m", method="POST"))
    @method_decorator(ratelimit(key="ip", rate="10/m", method="POST"))
    def create(self, request, *args, **kwargs):
        """
        Place an order for the authenticated customer.

        Security:
        - A saved address is only resolved among the caller's own addresses
        - Unpublished and unknown products are dropped from the cart
        - Failures are audited before the error response goes out
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            shipping_address = data.get("shipping_address")
            if not shipping_address:
                shipping_address = services.resolve_shipping_address(request.user, data["address_id"])
            order = services.place_order(
                request.user,
                data["items"],
                data["payment_method"],
                shipping_address,
                customer_name=data.get("customer_name") or None,
            )
        except StorefrontError as exc:
            log_action(request, "CREATE", "ORDER", None, "FAILURE", {"error": exc.message})
            raise

        log_action(request, "CREATE", "ORDER", order.pk, "SUCCESS", {"total": order.total})
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], permission_classes=[AllowAny], authentication_classes=[])
    @method_decorator(ratelimit(key="ip", rate="30/m", method="GET"))
    def track(self, request, pk=None):
        """Public status lookup. No customer, address or line details."""
        return Response(services.track_order(pk))

    @action(detail=True, methods=["patch"], url_path="status", permission_classes=[IsAdmin])
    @method_decorator(ratelimit(key="user", rate="20/m", method="PATCH"))
    def update_status(self, request, pk=None):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["status"]

        order = services.update_order_status(pk, target, request.user)
        log_action(request, "UPDATE_STATUS", "ORDER", order.pk, "SUCCESS", {"new_status": target})
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["put"])
    @method_decorator(ratelimit(key="user", rate="10/m", method="PUT"))
    def cancel(self, request, pk=None):
        """
        Cancel a Pending order and return its stock.

        Security: only the owner or an admin may cancel; anyone else gets 401.
        """
        try:
            order = services.cancel_order(pk, request.user)
        except StorefrontError as exc:
            log_action(request, "CANCEL", "ORDER", pk, "FAILURE", {"error": exc.message})
            raise

        log_action(request, "CANCEL", "ORDER", order.pk, "SUCCESS")
        return Response(OrderSerializer(order).data)
