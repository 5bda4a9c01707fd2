"""
Vendor directory for the farmers market.

Vendors are the farms and producers whose goods are listed in the catalog.
Products keep an optional reference; removing a vendor leaves its products
listed without one.
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Vendor(models.Model):
    name = models.CharField(max_length=200, db_index=True)
    location = models.CharField(max_length=200)
    description = models.TextField()
    image = models.CharField(max_length=500, help_text=_("Image URL"))
    rating = models.FloatField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = _("Vendor")
        verbose_name_plural = _("Vendors")

    def __str__(self):
        return f"{self.name} ({self.location})"
