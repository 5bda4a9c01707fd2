"""Tests for order placement, cancellation, status changes and tracking."""

import uuid
from decimal import Decimal

import pytest
from django.db import DatabaseError
from django.template import TemplateSyntaxError

from core.exceptions import (
    EmptyOrderError,
    InsufficientStockError,
    InvalidStateTransition,
    NotAuthorizedError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from orders import services
from orders.models import Order, OrderItem, OrderStatus
from products.models import Product
from storefront.models import StoreSettings

pytestmark = pytest.mark.django_db


def place(customer, shipping_address, *lines, payment_method="Pay on delivery"):
    items = [{"product_id": product.pk, "quantity": quantity} for product, quantity in lines]
    return services.place_order(customer, items, payment_method, shipping_address)


class TestPlaceOrder:
    def test_reduces_stock_and_snapshots_lines(self, customer, shipping_address, make_product):
        yam = make_product(stock=10, price=2000)

        order = place(customer, shipping_address, (yam, 3))

        yam.refresh_from_db()
        assert yam.stock == 7
        assert yam.status == Product.Status.ACTIVE
        assert order.status == OrderStatus.PENDING
        assert order.customer_name == "Ada Obi"
        assert order.customer_email == "ada@example.com"
        item = order.items.get()
        assert (item.name, item.price, item.quantity, item.unit) == ("Yam tuber", 2000, 3, "tuber")
        assert item.product_id == yam.pk

    def test_totals_include_shipping_and_tax(self, customer, shipping_address, make_product):
        store = StoreSettings.load()
        store.tax_rate = Decimal("7.5")
        store.save()
        yam = make_product(stock=10, price=2000)

        order = place(customer, shipping_address, (yam, 3))

        assert order.subtotal == 6000
        assert order.shipping_cost == 1500
        assert order.tax_amount == 450
        assert order.total == 6000 + 1500 + 450

    def test_free_shipping_at_threshold(self, customer, shipping_address, make_product):
        crate = make_product(name="Tomato crate", price=25000, stock=10)

        order = place(customer, shipping_address, (crate, 2))

        assert order.subtotal == 50000
        assert order.shipping_cost == 0
        assert order.total == 50000

    def test_low_stock_product_sells_out(self, customer, shipping_address, make_product):
        pepper = make_product(name="Pepper", stock=4)
        assert pepper.status == Product.Status.LOW_STOCK

        place(customer, shipping_address, (pepper, 4))

        pepper.refresh_from_db()
        assert pepper.stock == 0
        assert pepper.status == Product.Status.OUT_OF_STOCK

    def test_oversell_clamps_by_default(self, customer, shipping_address, make_product):
        pepper = make_product(name="Pepper", stock=2)

        order = place(customer, shipping_address, (pepper, 5))

        pepper.refresh_from_db()
        assert pepper.stock == 0
        assert order.items.get().quantity == 5

    def test_oversell_rejected_when_enabled(self, customer, shipping_address, make_product, settings):
        settings.ORDERS_REJECT_OVERSELL = True
        pepper = make_product(name="Pepper", stock=2)

        with pytest.raises(InsufficientStockError) as excinfo:
            place(customer, shipping_address, (pepper, 5))

        assert excinfo.value.available == 2
        pepper.refresh_from_db()
        assert pepper.stock == 2
        assert Order.objects.count() == 0

    def test_empty_cart_rejected(self, customer, shipping_address):
        with pytest.raises(EmptyOrderError, match="No order items"):
            services.place_order(customer, [], "Card", shipping_address)
        assert Order.objects.count() == 0

    def test_missing_products_are_skipped(self, customer, shipping_address, make_product):
        yam = make_product(stock=10)
        items = [{"product_id": yam.pk, "quantity": 1}, {"product_id": 999999, "quantity": 2}]

        order = services.place_order(customer, items, "Card", shipping_address)

        assert order.items.count() == 1

    def test_only_missing_products_is_empty(self, customer, shipping_address):
        with pytest.raises(EmptyOrderError):
            services.place_order(customer, [{"product_id": 999999, "quantity": 1}], "Card", shipping_address)

    def test_string_product_ids(self, customer, shipping_address, make_product):
        yam = make_product(stock=10)

        order = services.place_order(
            customer, [{"product_id": str(yam.pk), "quantity": 2}, {"product_id": "yam", "quantity": 1}],
            "Card", shipping_address,
        )

        assert order.items.get().product == yam
        yam.refresh_from_db()
        assert yam.stock == 8

    def test_draft_product_cannot_be_ordered(self, customer, shipping_address, make_product):
        draft = make_product(stock=20, status=Product.Status.DRAFT)

        with pytest.raises(EmptyOrderError):
            place(customer, shipping_address, (draft, 17))

        draft.refresh_from_db()
        assert draft.stock == 20
        assert draft.status == Product.Status.DRAFT
        assert not draft.is_published
        assert Order.objects.count() == 0

    def test_draft_lines_are_skipped(self, customer, shipping_address, make_product):
        yam = make_product(stock=10)
        draft = make_product(name="Secret yam", stock=20, status=Product.Status.DRAFT)

        order = place(customer, shipping_address, (yam, 1), (draft, 17))

        assert [item.name for item in order.items.all()] == ["Yam tuber"]
        draft.refresh_from_db()
        assert draft.stock == 20
        assert not draft.is_published

    def test_database_failure_rolls_back(self, customer, shipping_address, make_product, monkeypatch):
        yam = make_product(stock=10)

        def fail(*args, **kwargs):
            raise DatabaseError("disk full")

        monkeypatch.setattr(OrderItem.objects, "bulk_create", fail)

        with pytest.raises(PersistenceError):
            place(customer, shipping_address, (yam, 3))

        yam.refresh_from_db()
        assert yam.stock == 10
        assert Order.objects.count() == 0

    def test_shipping_address_is_a_copy(self, customer, saved_address, make_product):
        yam = make_product(stock=10)
        snapshot = services.resolve_shipping_address(customer, saved_address.pk)

        order = services.place_order(customer, [{"product_id": yam.pk, "quantity": 1}], "Card", snapshot)
        saved_address.street = "1 New Road"
        saved_address.save()

        order.refresh_from_db()
        assert order.shipping_address.street == "12 Allen Avenue"
        assert order.shipping_address.phone == "+2348012345678"

    def test_other_customers_address_not_found(self, other_customer, saved_address):
        with pytest.raises(NotFoundError):
            services.resolve_shipping_address(other_customer, saved_address.pk)

    def test_totals_survive_price_change(self, customer, shipping_address, make_product):
        yam = make_product(stock=10, price=2000)
        order = place(customer, shipping_address, (yam, 2))

        yam.price = 9000
        yam.save()

        order = Order.objects.get(pk=order.pk)
        assert order.total == 4000 + 1500
        assert order.items.get().price == 2000

    def test_sends_confirmation(self, customer, shipping_address, make_product, mailoutbox):
        yam = make_product(stock=10)

        order = place(customer, shipping_address, (yam, 1))

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["ada@example.com"]
        assert str(order.pk) in mailoutbox[0].subject

    def test_notification_failure_does_not_fail_order(self, customer, shipping_address, make_product, monkeypatch):
        yam = make_product(stock=10)

        def refuse(self, fail_silently=False):
            raise ConnectionRefusedError("smtp down")

        monkeypatch.setattr("django.core.mail.EmailMultiAlternatives.send", refuse)

        order = place(customer, shipping_address, (yam, 1))

        assert Order.objects.filter(pk=order.pk).exists()
        yam.refresh_from_db()
        assert yam.stock == 9

    def test_template_failure_does_not_fail_order(self, customer, shipping_address, make_product, monkeypatch, mailoutbox):
        yam = make_product(stock=10)

        def broken(template_name, context=None):
            raise TemplateSyntaxError("Invalid block tag")

        monkeypatch.setattr("notifications.messages.render_to_string", broken)

        order = place(customer, shipping_address, (yam, 1))

        assert Order.objects.filter(pk=order.pk).exists()
        assert mailoutbox == []


class TestCancelOrder:
    def test_place_cancel_scenario(self, customer, shipping_address, make_product):
        yam = make_product(stock=10)
        order = place(customer, shipping_address, (yam, 3))

        cancelled = services.cancel_order(order.pk, customer)

        yam.refresh_from_db()
        assert cancelled.status == OrderStatus.CANCELLED
        assert yam.stock == 10
        assert yam.status == Product.Status.ACTIVE

        with pytest.raises(InvalidStateTransition):
            services.cancel_order(order.pk, customer)
        yam.refresh_from_db()
        assert yam.stock == 10

    def test_sold_out_product_returns_to_low_stock(self, customer, shipping_address, make_product):
        pepper = make_product(name="Pepper", stock=4)
        order = place(customer, shipping_address, (pepper, 4))

        services.cancel_order(order.pk, customer)

        pepper.refresh_from_db()
        assert pepper.stock == 4
        assert pepper.status == Product.Status.LOW_STOCK

    def test_stock_conserved_across_products(self, customer, shipping_address, make_product):
        yam = make_product(stock=10)
        eggs = make_product(name="Eggs", stock=30, price=3500)
        order = place(customer, shipping_address, (yam, 2), (eggs, 12), (yam, 1))

        yam.refresh_from_db()
        eggs.refresh_from_db()
        assert (yam.stock, eggs.stock) == (7, 18)

        services.cancel_order(order.pk, customer)

        yam.refresh_from_db()
        eggs.refresh_from_db()
        assert (yam.stock, eggs.stock) == (10, 30)

    @pytest.mark.parametrize("status", [OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_only_pending_can_be_cancelled(self, customer, shipping_address, make_product, status):
        yam = make_product(stock=10)
        order = place(customer, shipping_address, (yam, 3))
        Order.objects.filter(pk=order.pk).update(status=status)
        before = Order.objects.values().get(pk=order.pk)

        with pytest.raises(InvalidStateTransition, match="no longer pending"):
            services.cancel_order(order.pk, customer)

        yam.refresh_from_db()
        assert yam.stock == 7
        assert Order.objects.values().get(pk=order.pk) == before

    def test_other_customer_cannot_cancel(self, customer, other_customer, shipping_address, make_product):
        yam = make_product(stock=10)
        order = place(customer, shipping_address, (yam, 3))

        with pytest.raises(NotAuthorizedError):
            services.cancel_order(order.pk, other_customer)

        assert Order.objects.get(pk=order.pk).status == OrderStatus.PENDING

    def test_admin_can_cancel(self, customer, admin_user, shipping_address, make_product):
        yam = make_product(stock=10)
        order = place(customer, shipping_address, (yam, 3))

        assert services.cancel_order(order.pk, admin_user).status == OrderStatus.CANCELLED

    def test_deleted_product_is_skipped(self, customer, shipping_address, make_product):
        yam = make_product(stock=10)
        eggs = make_product(name="Eggs", stock=30)
        order = place(customer, shipping_address, (yam, 2), (eggs, 5))
        yam.delete()

        services.cancel_order(order.pk, customer)

        eggs.refresh_from_db()
        assert eggs.stock == 30
        assert order.items.filter(product__isnull=True).get().name == "Yam tuber"

    def test_unknown_order(self, customer):
        with pytest.raises(NotFoundError):
            services.cancel_order(uuid.uuid4(), customer)


class TestUpdateOrderStatus:
    def test_walks_fulfilment(self, customer, admin_user, shipping_address, make_product):
        yam = make_product(stock=10)
        order = place(customer, shipping_address, (yam, 3))

        for status in (OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            order = services.update_order_status(order.pk, status, admin_user)
            assert order.status == status

        assert order.shipped_at is not None
        assert order.delivered_at is not None
        yam.refresh_from_db()
        assert yam.stock == 7

    def test_same_status_is_noop(self, customer, admin_user, shipping_address, make_product):
        order = place(customer, shipping_address, (make_product(stock=10), 1))

        assert services.update_order_status(order.pk, OrderStatus.PENDING, admin_user).status == OrderStatus.PENDING

    def test_skipping_a_step_is_rejected(self, customer, admin_user, shipping_address, make_product):
        order = place(customer, shipping_address, (make_product(stock=10), 1))

        with pytest.raises(InvalidStateTransition):
            services.update_order_status(order.pk, OrderStatus.SHIPPED, admin_user)

    def test_unknown_status_rejected(self, customer, admin_user, shipping_address, make_product):
        order = place(customer, shipping_address, (make_product(stock=10), 1))

        with pytest.raises(ValidationError):
            services.update_order_status(order.pk, "Lost", admin_user)

    def test_cancelled_restores_stock(self, customer, admin_user, shipping_address, make_product):
        yam = make_product(stock=10)
        order = place(customer, shipping_address, (yam, 3))

        order = services.update_order_status(order.pk, OrderStatus.CANCELLED, admin_user)

        yam.refresh_from_db()
        assert order.status == OrderStatus.CANCELLED
        assert yam.stock == 10

    def test_customer_cannot_change_status(self, customer, shipping_address, make_product):
        order = place(customer, shipping_address, (make_product(stock=10), 1))

        with pytest.raises(NotAuthorizedError):
            services.update_order_status(order.pk, OrderStatus.CONFIRMED, customer)

    def test_shipping_sends_notice(self, customer, admin_user, shipping_address, make_product, mailoutbox):
        order = place(customer, shipping_address, (make_product(stock=10), 1))
        services.update_order_status(order.pk, OrderStatus.CONFIRMED, admin_user)
        mailoutbox.clear()

        services.update_order_status(order.pk, OrderStatus.SHIPPED, admin_user)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].subject.startswith("Order Shipped")
        html = mailoutbox[0].alternatives[0][0]
        assert "12 Allen Avenue" in html
        assert "+2348012345678" in html

    def test_shipped_status_survives_mail_failure(self, customer, admin_user, shipping_address, make_product, monkeypatch):
        order = place(customer, shipping_address, (make_product(stock=10), 1))
        services.update_order_status(order.pk, OrderStatus.CONFIRMED, admin_user)

        def refuse(self, fail_silently=False):
            raise ConnectionRefusedError("smtp down")

        monkeypatch.setattr("django.core.mail.EmailMultiAlternatives.send", refuse)

        order = services.update_order_status(order.pk, OrderStatus.SHIPPED, admin_user)

        assert order.status == OrderStatus.SHIPPED
        stored = Order.objects.get(pk=order.pk)
        assert stored.status == OrderStatus.SHIPPED
        assert stored.shipped_at is not None

    def test_repeated_shipped_sends_one_notice(self, customer, admin_user, shipping_address, make_product, mailoutbox):
        order = place(customer, shipping_address, (make_product(stock=10), 1))
        services.update_order_status(order.pk, OrderStatus.CONFIRMED, admin_user)
        mailoutbox.clear()

        services.update_order_status(order.pk, OrderStatus.SHIPPED, admin_user)
        services.update_order_status(order.pk, OrderStatus.SHIPPED, admin_user)

        assert len(mailoutbox) == 1

    def test_unknown_order(self, admin_user):
        with pytest.raises(NotFoundError):
            services.update_order_status(uuid.uuid4(), OrderStatus.CONFIRMED, admin_user)


class TestTrackOrder:
    def test_minimal_projection(self, customer, shipping_address, make_product):
        yam = make_product(stock=10)
        eggs = make_product(name="Eggs", stock=30)
        order = place(customer, shipping_address, (yam, 2), (eggs, 3))

        tracked = services.track_order(str(order.pk))

        assert tracked == {
            "id": str(order.pk),
            "status": OrderStatus.PENDING,
            "date": order.date.isoformat(),
            "total": order.total,
            "items": 2,
        }

    @pytest.mark.parametrize("order_id", ["not-a-uuid", "", str(uuid.uuid4())])
    def test_unknown_or_malformed_id(self, order_id):
        with pytest.raises(NotFoundError):
            services.track_order(order_id)


class TestListOrders:
    def test_customer_sees_own_admin_sees_all(self, customer, other_customer, admin_user, shipping_address, make_product):
        yam = make_product(stock=10)
        mine = place(customer, shipping_address, (yam, 1))
        place(other_customer, shipping_address, (yam, 1))

        assert [order.pk for order in services.list_orders(customer)] == [mine.pk]
        assert services.list_orders(admin_user).count() == 2
