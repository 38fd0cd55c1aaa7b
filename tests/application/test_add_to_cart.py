"""Integration tests for the AddToCart use case."""

import pytest

from grocer.application.add_to_cart import AddToCartHandler
from grocer.domain.exceptions import InsufficientStockError, NotFoundError, ValidationError
from grocer.domain.model.catalog import ProductVariant
from grocer.domain.model.value_objects import Money
from tests.fakes import ALICE, BREAD, CENTRAL, CLOSED, MILK, NORTH, RETIRED, put_stock


class TestAddToCart:

    def test_creates_cart_on_first_use(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 5)
        dto = AddToCartHandler(catalog).handle(ALICE, CENTRAL, MILK, 2)
        assert dto.user_id == ALICE
        assert dto.store_id == CENTRAL
        assert [(i.variant_id, i.quantity, i.price_at_add) for i in dto.items] == [(MILK, 2, 15000)]
        assert dto.subtotal == 30000

    def test_merges_quantity_and_keeps_first_price(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 5)
        handler = AddToCartHandler(catalog)
        handler.handle(ALICE, CENTRAL, MILK, 2)
        with catalog() as uow:
            uow.catalog.save_variant(
                ProductVariant(MILK, "Fresh Milk", "1 L", "MILK-1L", Money.of(17000))
            )
            uow.commit()

        dto = handler.handle(ALICE, CENTRAL, MILK, 1)
        [item] = dto.items
        assert item.quantity == 3
        assert item.price_at_add == 15000

    def test_merged_quantity_checked_against_stock(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 3)
        handler = AddToCartHandler(catalog)
        handler.handle(ALICE, CENTRAL, MILK, 2)
        with pytest.raises(InsufficientStockError, match="Available: 3, Requested: 4"):
            handler.handle(ALICE, CENTRAL, MILK, 2)

    def test_other_store_rejected_while_cart_has_items(self, catalog):
        put_stock(catalog, CENTRAL, MILK, 5)
        put_stock(catalog, NORTH, BREAD, 5)
        handler = AddToCartHandler(catalog)
        handler.handle(ALICE, CENTRAL, MILK, 1)
        with pytest.raises(ValidationError, match="another store"):
            handler.handle(ALICE, NORTH, BREAD, 1)

    def test_product_not_in_store(self, catalog):
        with pytest.raises(InsufficientStockError):
            AddToCartHandler(catalog).handle(ALICE, CENTRAL, BREAD, 1)

    def test_inactive_variant_rejected(self, catalog):
        with pytest.raises(ValidationError, match="not available"):
            AddToCartHandler(catalog).handle(ALICE, CENTRAL, RETIRED, 1)

    def test_closed_store_rejected(self, catalog):
        with pytest.raises(NotFoundError):
            AddToCartHandler(catalog).handle(ALICE, CLOSED, MILK, 1)

    def test_unknown_variant(self, catalog):
        with pytest.raises(NotFoundError):
            AddToCartHandler(catalog).handle(ALICE, CENTRAL, "ghost", 1)
