"""
Review aggregation for the catalog.
"""

import logging

from django.db import transaction

from core.exceptions import NotFoundError, ValidationError
from products.models import Product

from .models import Review

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def mean_rating(ratings) -> float:
    """Arithmetic mean of the ratings, 0 for no ratings."""
    ratings = list(ratings)
    if not ratings:
        return 0
    return sum(ratings) / len(ratings)


def recompute_rating(product: Product) -> Product:
    """Refresh ``rating`` and ``review_count`` from the full review list."""
    ratings = list(product.reviews.values_list("rating", flat=True))
    product.review_count = len(ratings)
    product.rating = mean_rating(ratings)
    product.save(update_fields=["rating", "review_count", "updated_at"])
    return product


@transaction.atomic
def submit_review(product_id, user_name: str, rating: int, comment: str, author=None) -> Product:
    """
    Append a review dated today and return the product with its refreshed
    rating and review count.
    """
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")

    try:
        product = Product.objects.select_for_update().filter(pk=product_id).first()
    except (TypeError, ValueError):
        product = None
    if product is None:
        raise NotFoundError("Product", product_id)

    Review.objects.create(
        product=product,
        author=author,
        user_name=user_name,
        rating=rating,
        comment=comment,
    )
    recompute_rating(product)
    logger.info("Review added to product %s; rating now %.2f over %d reviews",
                product.pk, product.rating, product.review_count)
    return product
