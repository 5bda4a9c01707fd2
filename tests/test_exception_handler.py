"""Tests for the mapping of domain errors to HTTP responses."""

import pytest
from rest_framework.exceptions import NotFound

from core.exception_handler import status_code_for, storefront_exception_handler
from core.exceptions import (
    AccountSuspended,
    EmptyOrderError,
    InsufficientStockError,
    InvalidStateTransition,
    NotAuthorizedError,
    NotFoundError,
    PersistenceError,
    StorefrontError,
)


class TestStatusCodes:
    @pytest.mark.parametrize(
        "exc, code",
        [
            (EmptyOrderError(), 400),
            (InsufficientStockError("Yam", 2, 5), 400),
            (InvalidStateTransition("Shipped", "Cancelled"), 400),
            (NotFoundError("Order", "abc"), 404),
            (NotAuthorizedError(), 401),
            (AccountSuspended(), 403),
            (PersistenceError(), 500),
            (StorefrontError(), 500),
        ],
    )
    def test_status_code_for(self, exc, code):
        assert status_code_for(exc) == code

    def test_body_is_detail_message(self):
        response = storefront_exception_handler(NotFoundError("Product", 7), {})

        assert response.status_code == 404
        assert response.data == {"detail": "Product not found"}

    def test_other_errors_fall_through(self):
        response = storefront_exception_handler(NotFound(), {})

        assert response.status_code == 404

    def test_stock_message(self):
        exc = InsufficientStockError("Yam", 2, 5)

        assert exc.message == "Insufficient stock for Yam. Available: 2, Requested: 5"
