"""
Catalog models for the farmers market storefront.

A Product carries its price in whole naira, its stock level and a status
label derived from that stock. Rating and review count are denormalized
from the product's reviews and refreshed whenever a review is appended.
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from .inventory import ProductStatus, derive_stock_status


class Category(models.TextChoices):
    TUBERS = "Tubers", _("Tubers")
    FRUITS = "Fruits", _("Fruits")
    VEGETABLES = "Vegetables", _("Vegetables")
    MEAT = "Meat & Poultry", _("Meat & Poultry")
    DAIRY = "Dairy & Eggs", _("Dairy & Eggs")
    GRAINS = "Grains & Legumes", _("Grains & Legumes")
    HERBS = "Herbs & Spices", _("Herbs & Spices")
    NUTS = "Nuts & Seeds", _("Nuts & Seeds")
    PANTRY = "Pantry/Cooking Essentials", _("Pantry/Cooking Essentials")


class Product(models.Model):
    """
    Item for sale in the storefront.

    ``status`` is re-derived from ``stock`` on every stock mutation, so the
    Low Stock and Out of Stock labels always agree with the stock level.

    Visibility Considerations:
    - ``is_published`` alone decides whether customers can see or order the
      product; the stock labels never publish a draft
    - An unpublished product with healthy stock is labelled Draft
    - Deleting a product leaves order line snapshots intact
    """

    Status = ProductStatus

    name = models.CharField(max_length=200, db_index=True)
    price = models.PositiveIntegerField(help_text=_("Unit price in whole naira"))
    unit = models.CharField(max_length=50, help_text=_("Unit label such as kg, bunch or crate"))
    category = models.CharField(max_length=40, choices=Category.choices, db_index=True)
    image = models.CharField(max_length=500, help_text=_("Image URL"))
    description = models.TextField(blank=True)
    stock = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
        db_index=True,
    )
    rating = models.FloatField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
        help_text=_("Mean of all review ratings"),
    )
    review_count = models.PositiveIntegerField(default=0)
    is_seasonal = models.BooleanField(default=False)
    is_published = models.BooleanField(
        default=True,
        db_index=True,
        help_text=_("If False, the product is hidden from customers and cannot be ordered"),
    )
    vendor = models.ForeignKey(
        "vendors.Vendor",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category", "status"]),
            models.Index(fields=["is_published", "created_at"]),
            models.Index(fields=["vendor", "created_at"]),
        ]
        verbose_name = _("Product")
        verbose_name_plural = _("Products")

    def __str__(self):
        return f"{self.name} ({self.unit})"

    def is_in_stock(self) -> bool:
        return self.stock > 0

    def refresh_status(self) -> None:
        """Re-derive the stock label, with Draft standing for an unpublished product."""
        if not self.is_published:
            current = ProductStatus.DRAFT
        elif self.status == ProductStatus.DRAFT:
            current = ProductStatus.ACTIVE
        else:
            current = self.status
        self.status = derive_stock_status(self.stock, current)

    def reduce_stock(self, quantity: int) -> None:
        """
        Take ``quantity`` units out of stock, clamping at zero, and save.

        Callers placing orders hold a row lock on the product for the
        duration of their transaction.
        """
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        self.stock = max(self.stock - quantity, 0)
        self.refresh_status()
        self.save(update_fields=["stock", "status", "updated_at"])

    def increase_stock(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        self.stock += quantity
        self.refresh_status()
        self.save(update_fields=["stock", "status", "updated_at"])
