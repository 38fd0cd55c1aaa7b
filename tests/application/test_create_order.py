"""Integration tests for the CreateOrder (checkout) use case."""

from datetime import timedelta

import pytest

from grocer.application import create_order
from grocer.application.add_to_cart import AddToCartHandler
from grocer.application.create_order import CreateOrderHandler
from grocer.application.show_order import ShowOrderHandler
from grocer.domain.exceptions import InsufficientStockError, ValidationError
from grocer.domain.model.catalog import ProductVariant
from grocer.domain.model.order import ShippingSelection
from grocer.domain.model.value_objects import Money
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)
from tests.fakes import (
    ALICE,
    ALICE_HOME,
    BOB_HOME,
    BREAD,
    CENTRAL,
    MILK,
    inventory_of,
    put_stock,
    reserve,
)

SHIPPING = ShippingSelection.create("JNE", "REG", 10000, "Regular", "2-3 days")


def _setup(catalog, clock, lines=((MILK, 2), (BREAD, 1))):
    put_stock(catalog, CENTRAL, MILK, 10)
    put_stock(catalog, CENTRAL, BREAD, 10)
    cart = AddToCartHandler(catalog)
    for variant_id, qty in lines:
        cart.handle(ALICE, CENTRAL, variant_id, qty)
    return CreateOrderHandler(catalog, clock)


def _cart_of(uow_factory, user_id):
    with uow_factory() as uow:
        return uow.carts.get_for_user(user_id)


def _order_count(uow_factory, user_id):
    with uow_factory() as uow:
        return uow.orders.list_for_user(user_id, 1, 10)[1]


class TestCreateOrderHappyPath:

    def test_returns_order_id_and_number(self, catalog, clock):
        handler = _setup(catalog, clock)
        dto = handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")
        assert len(dto.order_id) == 32
        assert dto.order_number.startswith("ORD-20260315090000-")

    def test_order_contents(self, catalog, clock):
        handler = _setup(catalog, clock)
        created = handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")

        order = ShowOrderHandler(catalog).handle(ALICE, created.order_id)
        assert order.order_status == "PENDING_PAYMENT"
        assert order.payment_status == "UNPAID"
        assert order.store_id == CENTRAL
        assert order.subtotal == 2 * 15000 + 20000
        assert order.total == order.subtotal + 10000
        assert order.auto_cancel_at == (clock.now + timedelta(hours=1)).isoformat()
        assert [(i.variant_id, i.quantity) for i in order.items] == [(MILK, 2), (BREAD, 1)]
        assert [h.to_status for h in order.history] == ["PENDING_PAYMENT"]

    def test_reserves_stock_and_clears_cart(self, catalog, clock):
        handler = _setup(catalog, clock)
        handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")

        milk = inventory_of(catalog, CENTRAL, MILK)
        assert (milk.quantity, milk.reserved) == (10, 2)
        assert inventory_of(catalog, CENTRAL, BREAD).reserved == 1
        assert _cart_of(catalog, ALICE).is_empty

    def test_uses_price_at_add(self, catalog, clock):
        handler = _setup(catalog, clock, lines=((MILK, 1),))
        with catalog() as uow:
            uow.catalog.save_variant(
                ProductVariant(MILK, "Fresh Milk", "1 L", "MILK-1L", Money.of(18000))
            )
            uow.commit()

        created = handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")
        order = ShowOrderHandler(catalog).handle(ALICE, created.order_id)
        assert order.items[0].price == 15000

    def test_custom_payment_window(self, catalog, clock):
        _setup(catalog, clock)
        handler = CreateOrderHandler(catalog, clock, auto_cancel_after=timedelta(minutes=15))
        created = handler.handle(ALICE, ALICE_HOME, SHIPPING, "PAYMENT_GATEWAY")
        order = ShowOrderHandler(catalog).handle(ALICE, created.order_id)
        assert order.auto_cancel_at == (clock.now + timedelta(minutes=15)).isoformat()
        assert order.payment_method == "PAYMENT_GATEWAY"


class TestCreateOrderPreconditions:

    def test_empty_cart(self, catalog, clock):
        handler = CreateOrderHandler(catalog, clock)
        with pytest.raises(ValidationError, match="Cart is empty"):
            handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")

    def test_missing_address(self, catalog, clock):
        handler = _setup(catalog, clock)
        with pytest.raises(ValidationError, match="Address is required"):
            handler.handle(ALICE, None, SHIPPING, "MANUAL_TRANSFER")

    def test_foreign_address(self, catalog, clock):
        handler = _setup(catalog, clock)
        with pytest.raises(ValidationError, match="Address not found"):
            handler.handle(ALICE, BOB_HOME, SHIPPING, "MANUAL_TRANSFER")

    def test_missing_shipping(self, catalog, clock):
        handler = _setup(catalog, clock)
        with pytest.raises(ValidationError, match="Shipping method is required"):
            handler.handle(ALICE, ALICE_HOME, None, "MANUAL_TRANSFER")

    def test_missing_payment_method(self, catalog, clock):
        handler = _setup(catalog, clock)
        with pytest.raises(ValidationError, match="Payment method is required"):
            handler.handle(ALICE, ALICE_HOME, SHIPPING, None)

    def test_stock_gone_since_adding_to_cart(self, catalog, clock):
        handler = _setup(catalog, clock, lines=((MILK, 3),))
        reserve(catalog, CENTRAL, MILK, 8)
        with pytest.raises(InsufficientStockError, match=r"Fresh Milk \(1 L\)"):
            handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")
        assert len(_cart_of(catalog, ALICE).items) == 1


class TestCreateOrderAtomicity:

    def test_lost_reservation_rolls_everything_back(self, catalog, clock, monkeypatch):
        handler = _setup(catalog, clock)

        # Another checkout takes the bread between the pre-check and the
        # reservation.
        original = InventoryReservationService.reserve_for_order

        def racing_reserve(self, order):
            self._uow.inventory.increment_reserved(CENTRAL, BREAD, 10)
            return original(self, order)

        monkeypatch.setattr(InventoryReservationService, "reserve_for_order", racing_reserve)

        with pytest.raises(InsufficientStockError):
            handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")

        assert _order_count(catalog, ALICE) == 0
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 0
        assert inventory_of(catalog, CENTRAL, BREAD).reserved == 0
        assert len(_cart_of(catalog, ALICE).items) == 2


class TestCartChangedDuringCheckout:
    """Something happens to the cart between the pre-checks and the write."""

    @staticmethod
    def _before_write(monkeypatch, action):
        real = create_order.run_in_transaction

        def run_after_action(uow_factory, work, attempts):
            monkeypatch.setattr(create_order, "run_in_transaction", real)
            action()
            return real(uow_factory, work, attempts)

        monkeypatch.setattr(create_order, "run_in_transaction", run_after_action)

    def test_same_cart_checked_out_twice(self, catalog, clock, monkeypatch):
        handler = _setup(catalog, clock, lines=((MILK, 2),))
        self._before_write(
            monkeypatch,
            lambda: CreateOrderHandler(catalog, clock).handle(
                ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER"
            ),
        )

        with pytest.raises(ValidationError, match="Cart is empty"):
            handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")

        assert _order_count(catalog, ALICE) == 1
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 2

    def test_line_added_meanwhile_stays_in_cart(self, catalog, clock, monkeypatch):
        handler = _setup(catalog, clock, lines=((MILK, 2),))
        self._before_write(
            monkeypatch, lambda: AddToCartHandler(catalog).handle(ALICE, CENTRAL, BREAD, 1)
        )

        created = handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")

        order = ShowOrderHandler(catalog).handle(ALICE, created.order_id)
        assert [(i.variant_id, i.quantity) for i in order.items] == [(MILK, 2)]
        assert [(i.variant_id, i.quantity) for i in _cart_of(catalog, ALICE).items] == [(BREAD, 1)]
        assert inventory_of(catalog, CENTRAL, BREAD).reserved == 0

    def test_quantity_changed_meanwhile(self, catalog, clock, monkeypatch):
        handler = _setup(catalog, clock)
        self._before_write(
            monkeypatch, lambda: AddToCartHandler(catalog).handle(ALICE, CENTRAL, BREAD, 1)
        )

        with pytest.raises(ValidationError, match="Cart changed during checkout"):
            handler.handle(ALICE, ALICE_HOME, SHIPPING, "MANUAL_TRANSFER")

        assert _order_count(catalog, ALICE) == 0
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 0
        cart = {i.variant_id: i.quantity for i in _cart_of(catalog, ALICE).items}
        assert cart == {MILK: 2, BREAD: 2}
