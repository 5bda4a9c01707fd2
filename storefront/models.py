"""
Store-wide settings record.

A single row holds the shipping and tax parameters used at checkout plus the
contact details shown to shoppers. Reads go through ``load()``, which caches
the row. ``save()`` drops the cached copy so the next read sees the change.
"""

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.cache import cache
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

CACHE_KEY = "storefront:settings"


class StoreSettings(models.Model):
    """
    Singleton row of checkout parameters.

    Security: only admins write it (see ``StoreSettingsView``); orders copy
    the computed charges at placement, so later edits never reprice them.
    """

    SINGLETON_PK = 1

    shipping_cost = models.PositiveIntegerField(default=1500)
    free_shipping_threshold = models.PositiveIntegerField(
        default=50000,
        help_text=_("Orders with a subtotal at or above this ship free"),
    )
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text=_("Tax as a percentage of the subtotal"),
    )
    site_name = models.CharField(max_length=100, default="Farmers Market")
    support_email = models.EmailField(default="support@farmersmarket.com")
    contact_phone = models.CharField(max_length=30, default="+234 800 000 0000")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Store settings")
        verbose_name_plural = _("Store settings")

    def __str__(self):
        return self.site_name

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)
        cache.delete(CACHE_KEY)

    def delete(self, *args, **kwargs):
        cache.delete(CACHE_KEY)
        return super().delete(*args, **kwargs)

    @classmethod
    def load(cls) -> "StoreSettings":
        instance = cache.get(CACHE_KEY)
        if instance is None:
            instance, _created = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
            cache.set(CACHE_KEY, instance, getattr(settings, "STORE_SETTINGS_CACHE_SECONDS", 300))
        return instance

    def shipping_for(self, subtotal: int) -> int:
        if subtotal >= self.free_shipping_threshold:
            return 0
        return self.shipping_cost

    def tax_for(self, subtotal: int) -> int:
        tax = Decimal(subtotal) * Decimal(self.tax_rate) / Decimal(100)
        return int(tax.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
