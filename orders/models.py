"""
Order models for the farmers market storefront.

An Order keeps frozen copies of everything it was placed with: line item
name, image, unit and price, the shipping address, and the charges that make
up the total. Later edits to products, addresses or store settings never
change an existing order.
"""

import uuid

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class OrderStatus(models.TextChoices):
    PENDING = "Pending", _("Pending")
    CONFIRMED = "Confirmed", _("Confirmed")
    SHIPPED = "Shipped", _("Shipped")
    DELIVERED = "Delivered", _("Delivered")
    CANCELLED = "Cancelled", _("Cancelled")


class Order(models.Model):
    """
    Customer purchase.

    Security Considerations:
    - The primary key is a random UUID so the public tracking endpoint
      cannot be used to enumerate orders
    - ``total`` is computed once on the server at placement and stored; it
      is never recomputed or taken from the client
    - ``customer`` is PROTECT so an account with orders cannot be deleted
    """

    Status = OrderStatus

    # Moves made through update_order_status. Cancellation is handled by
    # cancel_order and only leaves Pending.
    ALLOWED_TRANSITIONS = {
        OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
        OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED}),
        OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
        OrderStatus.DELIVERED: frozenset(),
        OrderStatus.CANCELLED: frozenset(),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer = models.ForeignKey(
        "authentication.User",
        on_delete=models.PROTECT,
        related_name="orders",
        help_text=_("Customer who placed this order"),
    )
    customer_name = models.CharField(max_length=150)
    customer_email = models.EmailField()

    subtotal = models.PositiveIntegerField(default=0, help_text=_("Sum of line totals"))
    shipping_cost = models.PositiveIntegerField(default=0)
    tax_amount = models.PositiveIntegerField(default=0)
    total = models.PositiveIntegerField(help_text=_("subtotal + shipping_cost + tax_amount"))

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
    )
    payment_method = models.CharField(max_length=50)
    date = models.DateField(default=timezone.localdate)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer", "created_at"]),
            models.Index(fields=["status", "created_at"]),
        ]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")

    def __str__(self):
        return f"Order {self.pk} - {self.customer_email} - {self.total}"

    def can_transition_to(self, target: str) -> bool:
        return target in self.ALLOWED_TRANSITIONS.get(self.status, frozenset())

    def can_be_cancelled(self) -> bool:
        return self.status == OrderStatus.PENDING

    def is_owned_by(self, user) -> bool:
        return user is not None and self.customer_id == user.pk

    @property
    def item_count(self) -> int:
        return self.items.count()


class OrderItem(models.Model):
    """
    Line item snapshot.

    ``product`` is only a reference for restocking on cancellation and is
    nulled when the product is deleted; the frozen fields stay.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    name = models.CharField(max_length=200)
    image = models.CharField(max_length=500, blank=True)
    unit = models.CharField(max_length=50, blank=True)
    price = models.PositiveIntegerField(help_text=_("Unit price at time of order"))
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")

    def __str__(self):
        return f"{self.quantity}x {self.name} in Order {self.order_id}"

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class ShippingAddress(models.Model):
    """Copy of the delivery address taken when the order was placed."""

    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="shipping_address")
    label = models.CharField(max_length=50, blank=True)
    street = models.CharField(max_length=255)
    landmark = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    lga = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    zip = models.CharField(max_length=20, blank=True)

    class Meta:
        verbose_name_plural = _("Shipping addresses")

    def __str__(self):
        return f"{self.street}, {self.lga}, {self.state}"
