"""Tests for the InventoryReservationService domain service."""

from datetime import datetime, timezone

import pytest

from grocer.domain.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ReservationUnderflowError,
    ValidationError,
)
from grocer.domain.model.catalog import Store
from grocer.domain.model.order import Order, OrderItem, PaymentMethod, ShippingSelection
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)
from tests.fakes import (
    BREAD,
    CENTRAL,
    CLOSED,
    EGGS,
    MILK,
    NORTH,
    inventory_of,
    put_stock,
    reserve,
)


def _release(uow_factory, store, variant, qty):
    with uow_factory() as uow:
        InventoryReservationService(uow).release_reserved_stock(store, variant, qty)
        uow.commit()


def _order_for(uow_factory, lines: list[tuple[str, int]]) -> Order:
    with uow_factory() as uow:
        items = [OrderItem.snapshot(uow.catalog.get_variant(v), q) for v, q in lines]
    return Order.create(
        user_id="u1",
        address_id="a1",
        store_id=CENTRAL,
        shipping=ShippingSelection.create("JNE", "REG", 10000),
        items=items,
        payment_method=PaymentMethod.MANUAL_TRANSFER,
        order_number="ORD-T",
        now=datetime(2026, 3, 15, tzinfo=timezone.utc),
    )


class TestCheckStockAvailability:

    def test_available(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 5)
        with catalog() as uow:
            result = InventoryReservationService(uow).check_stock_availability(CENTRAL, MILK, 5)
        assert result.available is True
        assert result.inventory.quantity == 5

    def test_not_in_store(self, catalog):
        with catalog() as uow:
            result = InventoryReservationService(uow).check_stock_availability("nowhere", MILK, 1)
        assert result.available is False
        assert result.reason == "Product not available in this store"

    def test_reservations_count_against_availability(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 5)
        reserve(catalog, CENTRAL, MILK, 4)
        with catalog() as uow:
            result = InventoryReservationService(uow).check_stock_availability(CENTRAL, MILK, 2)
        assert result.available is False
        assert result.reason == "Insufficient stock. Available: 1, Requested: 2"

    def test_is_a_pure_read(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 5)
        with catalog() as uow:
            svc = InventoryReservationService(uow)
            for _ in range(3):
                svc.check_stock_availability(CENTRAL, MILK, 1)
            uow.commit()
        record = inventory_of(catalog, CENTRAL, MILK)
        assert (record.quantity, record.reserved) == (5, 0)


class TestReserveStock:

    def test_increments_reserved(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 10)
        reserve(catalog, CENTRAL, MILK, 3)
        record = inventory_of(catalog, CENTRAL, MILK)
        assert record.reserved == 3
        assert record.available == 7
        assert record.quantity == 10

    def test_reserve_all_available(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 2)
        reserve(catalog, CENTRAL, MILK, 2)
        assert inventory_of(catalog, CENTRAL, MILK).available == 0

    def test_oversell_rejected_without_mutation(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 2)
        with pytest.raises(InsufficientStockError) as exc_info:
            reserve(catalog, CENTRAL, MILK, 3)
        assert exc_info.value.available == 2
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 0

    def test_not_in_store(self, catalog):
        with pytest.raises(InsufficientStockError, match="not available in this store"):
            reserve(catalog, "nowhere", MILK, 1)

    def test_zero_quantity_rejected(self, catalog):
        with pytest.raises(ValidationError):
            reserve(catalog, CENTRAL, MILK, 0)


class TestReleaseReservedStock:

    def test_decrements_reserved(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 10)
        reserve(catalog, CENTRAL, MILK, 4)
        _release(catalog, CENTRAL, MILK, 3)
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 1

    def test_underflow_rejected(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 10)
        reserve(catalog, CENTRAL, MILK, 2)
        with pytest.raises(ReservationUnderflowError) as exc_info:
            _release(catalog, CENTRAL, MILK, 3)
        assert exc_info.value.reserved == 2
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 2

    def test_missing_row(self, catalog):
        with pytest.raises(NotFoundError):
            _release(catalog, "nowhere", MILK, 1)


class TestInitializeInventoryForVariant:

    def test_one_row_per_active_store(self, catalog):
        with catalog() as uow:
            rows = uow.inventory.list_for_variant(MILK)
        assert sorted(r.store_id for r in rows) == [CENTRAL, NORTH]
        assert inventory_of(catalog, CLOSED, MILK) is None

    def test_idempotent_and_keeps_counters(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 9)
        reserve(catalog, CENTRAL, MILK, 2)
        with catalog() as uow:
            count = InventoryReservationService(uow).initialize_inventory_for_variant(MILK)
            uow.commit()
        assert count == 2
        record = inventory_of(catalog, CENTRAL, MILK)
        assert (record.quantity, record.reserved) == (9, 2)

    def test_new_store_gets_row(self, catalog):
        with catalog() as uow:
            uow.catalog.save_store(Store("store-east", "East Market"))
            assert InventoryReservationService(uow).initialize_inventory_for_variant(MILK) == 3
            uow.commit()
        assert inventory_of(catalog, "store-east", MILK).quantity == 0

    def test_unknown_variant(self, catalog):
        with catalog() as uow:
            with pytest.raises(NotFoundError):
                InventoryReservationService(uow).initialize_inventory_for_variant("ghost")


class TestOrderReservations:

    def test_reserves_all_lines(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 10)
        put_stock(catalog, CENTRAL, BREAD, 10)
        order = _order_for(catalog, [(MILK, 3), (BREAD, 5)])
        with catalog() as uow:
            InventoryReservationService(uow).reserve_for_order(order)
            uow.commit()
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 3
        assert inventory_of(catalog, CENTRAL, BREAD).reserved == 5

    def test_failing_line_rolls_back_earlier_lines(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 10)
        put_stock(catalog, CENTRAL, EGGS, 1)
        order = _order_for(catalog, [(MILK, 3), (EGGS, 2)])
        with pytest.raises(InsufficientStockError):
            with catalog() as uow:
                InventoryReservationService(uow).reserve_for_order(order)
                uow.commit()
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 0

    def test_release_for_order(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 10)
        order = _order_for(catalog, [(MILK, 4)])
        with catalog() as uow:
            svc = InventoryReservationService(uow)
            svc.reserve_for_order(order)
            svc.release_for_order(order)
            uow.commit()
        assert inventory_of(catalog, CENTRAL, MILK).reserved == 0
