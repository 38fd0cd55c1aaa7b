"""Unit tests for the Order aggregate and its business rules."""

import re
from datetime import datetime, timedelta, timezone

import pytest

from grocer.domain.exceptions import ValidationError
from grocer.domain.model.catalog import ProductVariant
from grocer.domain.model.order import (
    MAX_LINE_ITEMS,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ShippingSelection,
    generate_order_number,
)
from grocer.domain.model.value_objects import Money

NOW = datetime(2026, 3, 15, 9, 30, tzinfo=timezone.utc)


def _variant(price: int = 15000, vid: str = "v1") -> ProductVariant:
    return ProductVariant(vid, "Fresh Milk", "1 L", "MILK-1L", Money.of(price))


def _shipping(fee: int = 10000) -> ShippingSelection:
    return ShippingSelection.create("JNE", "REG", fee, "Regular", "2-3 days")


def _order(items=None, fee: int = 10000) -> Order:
    return Order.create(
        user_id="u1",
        address_id="a1",
        store_id="s1",
        shipping=_shipping(fee),
        items=items if items is not None else [OrderItem.snapshot(_variant(), 2)],
        payment_method=PaymentMethod.MANUAL_TRANSFER,
        order_number="ORD-1",
        now=NOW,
    )


class TestOrderCreation:

    def test_happy_path(self):
        order = _order()
        assert order.order_status == OrderStatus.PENDING_PAYMENT
        assert order.payment_status == PaymentStatus.UNPAID
        assert order.subtotal == Money.of(30000)
        assert order.total == Money.of(40000)
        assert len(order.id) == 32

    def test_payment_record_carries_total(self):
        order = _order()
        assert order.payment.status == PaymentStatus.UNPAID
        assert order.payment.amount == order.total

    def test_initial_history_entry(self):
        [entry] = _order().history
        assert entry.from_status is None
        assert entry.to_status == OrderStatus.PENDING_PAYMENT
        assert entry.note == "Order created"
        assert entry.created_by == "u1"

    def test_auto_cancel_deadline(self):
        assert _order().auto_cancel_at == NOW + timedelta(hours=1)

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            _order(items=[])

    def test_too_many_lines_rejected(self):
        items = [OrderItem.snapshot(_variant(vid=f"v{i}"), 1) for i in range(MAX_LINE_ITEMS + 1)]
        with pytest.raises(ValidationError, match="Maximum 50 items"):
            _order(items=items)


class TestOrderItemSnapshot:

    def test_uses_given_price(self):
        item = OrderItem.snapshot(_variant(price=15000), 3, price=Money.of(12000))
        assert item.price == Money.of(12000)
        assert item.subtotal == Money.of(36000)
        assert item.total == Money.of(36000)

    def test_price_change_does_not_alter_snapshot(self):
        variant = _variant(price=15000)
        item = OrderItem.snapshot(variant, 1)
        variant.price = Money.of(99000)
        assert item.price == Money.of(15000)

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            OrderItem.snapshot(_variant(), 0)


class TestOrderCancel:

    def test_cancel_pending_order(self):
        order = _order()
        entry = order.cancel("u1", "Cancelled by customer", NOW)
        assert order.order_status == OrderStatus.CANCELLED
        assert order.payment_status == PaymentStatus.CANCELLED
        assert order.payment.status == PaymentStatus.CANCELLED
        assert entry.from_status == OrderStatus.PENDING_PAYMENT
        assert order.history[-1] is entry

    def test_cancel_twice_rejected(self):
        order = _order()
        order.cancel("u1", "first", NOW)
        with pytest.raises(ValidationError, match="expected PENDING_PAYMENT"):
            order.cancel("u1", "second", NOW)

    def test_is_expired(self):
        order = _order()
        assert not order.is_expired(NOW + timedelta(minutes=59))
        assert order.is_expired(NOW + timedelta(hours=1))
        order.cancel("SYSTEM", "expired", NOW, PaymentStatus.EXPIRED)
        assert not order.is_expired(NOW + timedelta(hours=2))


class TestShippingAndPayment:

    @pytest.mark.parametrize("courier,service,fee", [(None, "REG", 1), ("JNE", "", 1), ("JNE", "REG", None)])
    def test_shipping_required(self, courier, service, fee):
        with pytest.raises(ValidationError, match="Shipping method is required"):
            ShippingSelection.create(courier, service, fee)

    def test_payment_method_required(self):
        with pytest.raises(ValidationError, match="Payment method is required"):
            PaymentMethod.parse(None)

    def test_payment_method_parse(self):
        assert PaymentMethod.parse("payment_gateway") == PaymentMethod.PAYMENT_GATEWAY

    def test_unknown_payment_method(self):
        with pytest.raises(ValidationError, match="Unknown payment method"):
            PaymentMethod.parse("CASH")


class TestOrderNumber:

    def test_format(self):
        number = generate_order_number(NOW)
        assert re.fullmatch(r"ORD-20260315093000-[A-Z0-9]{8}", number)
