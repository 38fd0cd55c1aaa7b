"""Integration tests for inventory queries, reservations and initialization."""

import pytest

from grocer.application.check_stock import CheckStockHandler
from grocer.application.initialize_inventory import InitializeInventoryHandler
from grocer.application.release_stock import ReleaseStockHandler
from grocer.application.reserve_stock import ReserveStockHandler
from grocer.application.show_inventory import ShowInventoryHandler
from grocer.domain.exceptions import (
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    ReservationUnderflowError,
)
from grocer.domain.model.actor import Actor, ActorRole
from tests.fakes import BREAD, CENTRAL, EGGS, MILK, NORTH, RETIRED, put_stock

ADMIN = Actor("admin", ActorRole.SUPER_ADMIN)
CENTRAL_ADMIN = Actor("clerk", ActorRole.STORE_ADMIN, store_id=CENTRAL)
SHOPPER = Actor("shopper", ActorRole.CUSTOMER)


class TestCheckStock:

    def test_available(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 4)
        result = CheckStockHandler(catalog).handle(CENTRAL, MILK, 4)
        assert result.available is True
        assert result.reason == "Stock available"
        assert result.inventory.available == 4

    def test_insufficient(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 4)
        result = CheckStockHandler(catalog).handle(CENTRAL, MILK, 5)
        assert result.available is False
        assert result.reason == "Insufficient stock. Available: 4, Requested: 5"

    def test_absent(self, catalog):
        result = CheckStockHandler(catalog).handle("nowhere", MILK)
        assert result.available is False
        assert result.inventory is None


class TestReserveAndRelease:

    def test_reserve_then_release(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 10)
        reserved = ReserveStockHandler(catalog).handle(ADMIN, CENTRAL, MILK, 4)
        assert (reserved.reserved, reserved.available) == (4, 6)

        released = ReleaseStockHandler(catalog).handle(ADMIN, CENTRAL, MILK, 4)
        assert (released.reserved, released.available) == (0, 10)

    def test_reserve_more_than_available(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 1)
        with pytest.raises(InsufficientStockError):
            ReserveStockHandler(catalog).handle(ADMIN, CENTRAL, MILK, 2)

    def test_release_underflow(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 1)
        with pytest.raises(ReservationUnderflowError):
            ReleaseStockHandler(catalog).handle(ADMIN, CENTRAL, MILK, 1)

    def test_store_admin_of_other_store_forbidden(self, catalog):
        put_stock(catalog, NORTH, MILK, 10)
        with pytest.raises(ForbiddenError):
            ReserveStockHandler(catalog).handle(CENTRAL_ADMIN, NORTH, MILK, 1)

    def test_customer_forbidden(self, catalog):
        with pytest.raises(ForbiddenError):
            ReleaseStockHandler(catalog).handle(SHOPPER, CENTRAL, MILK, 1)


class TestShowInventory:

    def test_store_listing_with_search(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 3)
        put_stock(catalog, CENTRAL, BREAD, 2)
        handler = ShowInventoryHandler(catalog)

        page = handler.for_store(ADMIN, CENTRAL, limit=10)
        assert page.pagination.total_items == 4  # every variant has a row

        found = handler.for_store(ADMIN, CENTRAL, search="milk")
        assert [(r.variant_id, r.quantity) for r in found.items] == [(MILK, 3)]

        by_sku = handler.for_store(ADMIN, CENTRAL, search="bread-wht")
        assert [r.variant_id for r in by_sku.items] == [BREAD]

    def test_variant_across_stores(self, catalog):
        put_stock(catalog, CENTRAL, EGGS, 3)
        put_stock(catalog, NORTH, EGGS, 7)
        summary = ShowInventoryHandler(catalog).for_variant(ADMIN, EGGS)
        assert summary.store_count == 2
        assert summary.total_quantity == 10
        assert summary.total_available == 10

    def test_store_admin_sees_own_store_only(self, catalog):
        put_stock(catalog, CENTRAL, EGGS, 3)
        put_stock(catalog, NORTH, EGGS, 7)
        summary = ShowInventoryHandler(catalog).for_variant(CENTRAL_ADMIN, EGGS)
        assert [r.store_id for r in summary.inventories] == [CENTRAL]
        assert summary.total_quantity == 3

    def test_unknown_variant(self, catalog):
        with pytest.raises(NotFoundError):
            ShowInventoryHandler(catalog).for_variant(ADMIN, "ghost")

    def test_detail(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 3)
        dto = ShowInventoryHandler(catalog).detail(ADMIN, CENTRAL, MILK)
        assert dto.product_name == "Fresh Milk"
        assert dto.store_name == "Central Market"
        assert dto.quantity == 3

    def test_detail_missing(self, catalog):
        with pytest.raises(NotFoundError, match="Inventory not found"):
            ShowInventoryHandler(catalog).detail(ADMIN, NORTH, "ghost")


class TestInitializeInventory:

    def test_super_admin_only(self, catalog):
        with pytest.raises(ForbiddenError):
            InitializeInventoryHandler(catalog).handle(CENTRAL_ADMIN, MILK)

    def test_returns_store_count(self, catalog):
        assert InitializeInventoryHandler(catalog).handle(ADMIN, RETIRED) == 2
