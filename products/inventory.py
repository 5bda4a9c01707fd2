"""
Stock-derived product status.

``derive_stock_status`` is the single place the status labels are computed
from a stock level. Order placement, order cancellation and admin stock
edits all go through it.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

LOW_STOCK_THRESHOLD = 5


class ProductStatus(models.TextChoices):
    ACTIVE = "Active", _("Active")
    DRAFT = "Draft", _("Draft")
    LOW_STOCK = "Low Stock", _("Low Stock")
    OUT_OF_STOCK = "Out of Stock", _("Out of Stock")


STOCK_DERIVED_STATUSES = frozenset({ProductStatus.LOW_STOCK, ProductStatus.OUT_OF_STOCK})


def derive_stock_status(stock: int, current_status: str) -> str:
    """
    Project a product's status from its stock level.

    - ``stock <= 0`` -> Out of Stock
    - ``0 < stock < LOW_STOCK_THRESHOLD`` -> Low Stock
    - otherwise a stock-derived label resolves to Active, while Active and
      Draft are left as they are.
    """
    if stock <= 0:
        return ProductStatus.OUT_OF_STOCK
    if stock < LOW_STOCK_THRESHOLD:
        return ProductStatus.LOW_STOCK
    if current_status in STOCK_DERIVED_STATUSES:
        return ProductStatus.ACTIVE
    return current_status
