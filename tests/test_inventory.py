"""Tests for the stock status projection."""

import pytest

from products.inventory import LOW_STOCK_THRESHOLD, ProductStatus, derive_stock_status


class TestDeriveStockStatus:
    @pytest.mark.parametrize("current", list(ProductStatus.values))
    def test_zero_stock_is_out_of_stock(self, current):
        assert derive_stock_status(0, current) == ProductStatus.OUT_OF_STOCK

    @pytest.mark.parametrize("stock", [1, 2, LOW_STOCK_THRESHOLD - 1])
    def test_below_threshold_is_low_stock(self, stock):
        assert derive_stock_status(stock, ProductStatus.ACTIVE) == ProductStatus.LOW_STOCK

    def test_threshold_keeps_active(self):
        assert derive_stock_status(LOW_STOCK_THRESHOLD, ProductStatus.ACTIVE) == ProductStatus.ACTIVE

    @pytest.mark.parametrize("current", [ProductStatus.LOW_STOCK, ProductStatus.OUT_OF_STOCK])
    def test_restocked_label_resolves_to_active(self, current):
        assert derive_stock_status(12, current) == ProductStatus.ACTIVE

    def test_draft_preserved_when_stocked(self):
        assert derive_stock_status(20, ProductStatus.DRAFT) == ProductStatus.DRAFT

    def test_draft_out_of_stock_when_empty(self):
        assert derive_stock_status(0, ProductStatus.DRAFT) == ProductStatus.OUT_OF_STOCK


@pytest.mark.django_db
class TestProductStock:
    def test_reduce_clamps_at_zero(self, make_product):
        product = make_product(stock=3)
        product.reduce_stock(5)
        product.refresh_from_db()
        assert product.stock == 0
        assert product.status == ProductStatus.OUT_OF_STOCK

    def test_increase_rederives_status(self, make_product):
        product = make_product(stock=0)
        assert product.status == ProductStatus.OUT_OF_STOCK
        product.increase_stock(3)
        product.refresh_from_db()
        assert product.stock == 3
        assert product.status == ProductStatus.LOW_STOCK

    def test_non_positive_quantity_rejected(self, make_product):
        product = make_product(stock=3)
        with pytest.raises(ValueError):
            product.reduce_stock(0)
        with pytest.raises(ValueError):
            product.increase_stock(-1)
