"""
Order lifecycle: placement, status changes, cancellation and tracking.

Placement and cancellation touch the order and the stock of every product
it references, so each runs in one database transaction with the product
rows locked. A failure anywhere in the block rolls every write back.
Notifications go out once the transaction has finished and never fail the
operation.
"""

import logging
import uuid
from collections import Counter

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from authentication.models import Address
from core.exceptions import (
    EmptyOrderError,
    InsufficientStockError,
    InvalidStateTransition,
    NotAuthorizedError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from notifications.messages import send_order_confirmation, send_shipment_notice
from products.models import Product
from storefront.models import StoreSettings

from .models import Order, OrderItem, OrderStatus, ShippingAddress

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ("label", "street", "landmark", "city", "lga", "state", "phone", "zip")


def _order_queryset():
    return Order.objects.select_related("shipping_address").prefetch_related("items")


def _get_order(order_id, for_update=False) -> Order:
    try:
        order_uuid = uuid.UUID(str(order_id))
    except ValueError:
        raise NotFoundError("Order", order_id)
    queryset = Order.objects.select_for_update() if for_update else _order_queryset()
    order = queryset.filter(pk=order_uuid).first()
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


def resolve_shipping_address(customer, address_id) -> dict:
    """Snapshot of one of the customer's saved addresses."""
    address = Address.objects.filter(pk=address_id, user=customer).first()
    if address is None:
        raise NotFoundError("Address", address_id)
    return address.as_snapshot()


def place_order(customer, items, payment_method: str, shipping_address: dict, customer_name: str = None) -> Order:
    """
    Create a Pending order from ``items`` (``{"product_id", "quantity"}``
    dicts) and take the ordered quantities out of stock.

    Lines naming a product that no longer exists or is unpublished are
    dropped. Product ids may be given as ints or numeric strings. Stock is
    clamped at zero unless ``ORDERS_REJECT_OVERSELL`` is set, in which case
    a line asking for more than is available fails the whole order.
    """
    if not items:
        raise EmptyOrderError()

    try:
        order = _create_order(customer, items, payment_method, shipping_address, customer_name)
    except DatabaseError as exc:
        logger.exception("Could not persist order for customer %s", customer.pk)
        raise PersistenceError() from exc

    logger.info("Order %s placed by %s: %d lines, total %d",
                order.pk, customer.pk, order.items.count(), order.total)
    send_order_confirmation(order)
    return order


def _product_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@transaction.atomic
def _create_order(customer, items, payment_method, shipping_address, customer_name):
    requested = [(_product_id(line["product_id"]), line) for line in items]
    products = Product.objects.select_for_update().in_bulk(
        {product_id for product_id, _ in requested if product_id is not None}
    )

    lines = []
    for product_id, line in requested:
        product = products.get(product_id)
        if product is None:
            logger.warning("Skipping order line for missing product %s", line["product_id"])
            continue
        if not product.is_published:
            logger.warning("Skipping order line for unpublished product %s", product.pk)
            continue
        lines.append((product, line["quantity"]))
    if not lines:
        raise EmptyOrderError()

    if getattr(settings, "ORDERS_REJECT_OVERSELL", False):
        requested = Counter()
        for product, quantity in lines:
            requested[product.pk] += quantity
        for product_id, quantity in requested.items():
            product = products[product_id]
            if quantity > product.stock:
                raise InsufficientStockError(product.name, product.stock, quantity)

    store = StoreSettings.load()
    subtotal = sum(product.price * quantity for product, quantity in lines)
    shipping_cost = store.shipping_for(subtotal)
    tax_amount = store.tax_for(subtotal)

    order = Order.objects.create(
        customer=customer,
        customer_name=customer_name or customer.name,
        customer_email=customer.email,
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax_amount=tax_amount,
        total=subtotal + shipping_cost + tax_amount,
        payment_method=payment_method,
    )
    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            product=product,
            name=product.name,
            image=product.image,
            unit=product.unit,
            price=product.price,
            quantity=quantity,
            position=position,
        )
        for position, (product, quantity) in enumerate(lines)
    ])
    ShippingAddress.objects.create(
        order=order,
        **{field: shipping_address.get(field) or "" for field in SHIPPING_FIELDS},
    )

    for product, quantity in lines:
        product.reduce_stock(quantity)
    return order


def update_order_status(order_id, target_status: str, actor) -> Order:
    """
    Admin status change along Pending, Confirmed, Shipped, Delivered.

    Setting the current status again is a no-op. Cancelled goes through
    ``cancel_order`` so the stock comes back.
    """
    if actor is None or not actor.is_admin:
        raise NotAuthorizedError()
    if target_status not in OrderStatus.values:
        raise ValidationError(f"Invalid status: {target_status}")

    order = _get_order(order_id)
    if order.status == target_status:
        return order
    if target_status == OrderStatus.CANCELLED:
        return cancel_order(order_id, actor)

    with transaction.atomic():
        order = _get_order(order_id, for_update=True)
        if not order.can_transition_to(target_status):
            raise InvalidStateTransition(order.status, target_status)
        previous = order.status
        order.status = target_status
        if target_status == OrderStatus.SHIPPED:
            order.shipped_at = timezone.now()
        elif target_status == OrderStatus.DELIVERED:
            order.delivered_at = timezone.now()
        order.save(update_fields=["status", "shipped_at", "delivered_at", "updated_at"])

    logger.info("Order %s moved from %s to %s by %s", order.pk, previous, target_status, actor.pk)
    order = _get_order(order.pk)
    if target_status == OrderStatus.SHIPPED:
        send_shipment_notice(order)
    return order


def cancel_order(order_id, requester) -> Order:
    """
    Cancel a Pending order owned by ``requester`` (or any order for an
    admin) and put every line's quantity back in stock.
    """
    with transaction.atomic():
        order = _get_order(order_id, for_update=True)
        if not (order.is_owned_by(requester) or (requester is not None and requester.is_admin)):
            raise NotAuthorizedError()
        if not order.can_be_cancelled():
            raise InvalidStateTransition(
                order.status,
                OrderStatus.CANCELLED,
                "Cannot cancel order that is no longer pending",
            )

        items = list(order.items.all())
        products = Product.objects.select_for_update().in_bulk(
            {item.product_id for item in items if item.product_id is not None}
        )
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                # Deleted since the order was placed.
                continue
            product.increase_stock(item.quantity)

        order.status = OrderStatus.CANCELLED
        order.save(update_fields=["status", "updated_at"])

    logger.info("Order %s cancelled by %s", order.pk, requester.pk)
    return _get_order(order.pk)


def track_order(order_id) -> dict:
    """Public view of an order: no customer, address or line details."""
    order = _get_order(order_id)
    return {
        "id": str(order.pk),
        "status": order.status,
        "date": order.date.isoformat(),
        "total": order.total,
        "items": order.items.count(),
    }


def list_orders(user):
    queryset = _order_queryset().order_by("-created_at")
    if user.is_admin:
        return queryset
    return queryset.filter(customer=user)
