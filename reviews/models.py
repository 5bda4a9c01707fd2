"""
Review model for the farmers market storefront.

Reviews belong to a product and are append-only: each new review refreshes
the product's mean rating and review count. A customer may review the same
product more than once.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Review(models.Model):
    """A single rating and comment. ``author`` is kept only while the account exists."""

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviews",
        help_text=_("Account that submitted the review, if still present"),
    )
    user_name = models.CharField(max_length=150, help_text=_("Author display name"))
    rating = models.PositiveSmallIntegerField(
        validators=[
            MinValueValidator(1, message=_("Rating must be at least 1")),
            MaxValueValidator(5, message=_("Rating cannot exceed 5")),
        ],
    )
    comment = models.TextField()
    date = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["product", "created_at"]),
        ]
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")

    def __str__(self):
        return f"{self.user_name} - {self.product_id} - {self.rating}/5"
