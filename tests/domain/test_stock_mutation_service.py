"""Tests for the StockMutationService domain service.

Runs against the SQLAlchemy repositories on in-memory SQLite so the
conditional UPDATEs are exercised for real.
"""

import pytest

from grocer.domain.exceptions import InsufficientStockError, NotFoundError, ValidationError
from grocer.domain.model.catalog import ProductVariant, Store
from grocer.domain.model.stock_journal import StockJournalType
from grocer.domain.model.value_objects import Money
from grocer.domain.service.stock_mutation_service import StockMutationService
from tests.fakes import (
    BREAD,
    CENTRAL,
    MILK,
    NORTH,
    inventory_of,
    journal_count,
    put_stock,
    reserve,
)


def _stock_in(uow_factory, clock, qty, store=CENTRAL, variant=MILK):
    with uow_factory() as uow:
        entry = StockMutationService(uow, clock).record_stock_in(
            store, variant, qty, "PO-100", "Supplier delivery", "admin"
        )
        uow.commit()
    return entry


def _stock_out(uow_factory, clock, qty, store=CENTRAL, variant=MILK):
    with uow_factory() as uow:
        entry = StockMutationService(uow, clock).record_stock_out(
            store, variant, qty, "DMG-7", "Broken packaging", "admin"
        )
        uow.commit()
    return entry


class TestRecordStockIn:

    def test_adds_quantity_and_appends_entry(self, catalog, clock):
        entry = _stock_in(catalog, clock, 10)
        assert entry.id is not None
        assert entry.type == StockJournalType.IN
        assert entry.stock_before == 0
        assert entry.stock_after == 10
        assert entry.created_at == clock.now
        assert inventory_of(catalog, CENTRAL, MILK).quantity == 10

    def test_snapshots_chain(self, catalog, clock):
        first = _stock_in(catalog, clock, 10)
        second = _stock_in(catalog, clock, 5)
        assert second.stock_before == first.stock_after == 10
        assert second.stock_after == 15

    def test_creates_missing_inventory_row(self, uow_factory, clock):
        # Catalog without initialized inventory rows.
        with uow_factory() as uow:
            uow.catalog.save_store(Store("s-new", "New Store"))
            uow.catalog.save_variant(ProductVariant("v-new", "Tea", "Box", "TEA-1", Money.of(9000)))
            uow.commit()

        entry = _stock_in(uow_factory, clock, 4, store="s-new", variant="v-new")
        assert entry.stock_before == 0
        assert inventory_of(uow_factory, "s-new", "v-new").quantity == 4

    def test_does_not_touch_reserved(self, catalog, clock):
        put_stock(catalog, CENTRAL, MILK, 10)
        reserve(catalog, CENTRAL, MILK, 4)
        _stock_in(catalog, clock, 5)
        record = inventory_of(catalog, CENTRAL, MILK)
        assert record.quantity == 15
        assert record.reserved == 4

    def test_unknown_store_rejected(self, catalog, clock):
        with pytest.raises(NotFoundError, match="Store 'nowhere' not found"):
            _stock_in(catalog, clock, 1, store="nowhere")

    def test_unknown_variant_rejected(self, catalog, clock):
        with pytest.raises(NotFoundError, match="Product variant 'ghost' not found"):
            _stock_in(catalog, clock, 1, variant="ghost")

    def test_invalid_input_writes_nothing(self, catalog, clock):
        with pytest.raises(ValidationError):
            _stock_in(catalog, clock, 0)
        assert journal_count(catalog, CENTRAL) == 0


class TestRecordStockOut:

    def test_removes_quantity(self, catalog, clock):
        put_stock(catalog, CENTRAL, MILK, 10)
        entry = _stock_out(catalog, clock, 4)
        assert entry.type == StockJournalType.OUT
        assert entry.stock_before == 10
        assert entry.stock_after == 6
        assert inventory_of(catalog, CENTRAL, MILK).quantity == 6

    def test_can_empty_the_shelf(self, catalog, clock):
        put_stock(catalog, CENTRAL, MILK, 3)
        entry = _stock_out(catalog, clock, 3)
        assert entry.stock_after == 0

    def test_never_goes_negative(self, catalog, clock):
        put_stock(catalog, CENTRAL, MILK, 5)
        with pytest.raises(InsufficientStockError) as exc_info:
            _stock_out(catalog, clock, 6)
        assert exc_info.value.available == 5
        assert exc_info.value.requested == 6
        assert inventory_of(catalog, CENTRAL, MILK).quantity == 5
        assert journal_count(catalog, CENTRAL) == 1

    def test_reserved_units_cannot_be_written_off(self, catalog, clock):
        put_stock(catalog, CENTRAL, MILK, 10)
        reserve(catalog, CENTRAL, MILK, 8)
        with pytest.raises(InsufficientStockError, match="Available: 2, Requested: 3"):
            _stock_out(catalog, clock, 3)
        record = inventory_of(catalog, CENTRAL, MILK)
        assert record.quantity == 10
        assert record.reserved == 8

    def test_missing_inventory_row(self, catalog, clock):
        with pytest.raises(NotFoundError, match="non-existent inventory"):
            _stock_out(catalog, clock, 1, store="nowhere")

    def test_other_store_unaffected(self, catalog, clock):
        put_stock(catalog, CENTRAL, BREAD, 10)
        put_stock(catalog, NORTH, BREAD, 7)
        _stock_out(catalog, clock, 2, variant=BREAD)
        assert inventory_of(catalog, NORTH, BREAD).quantity == 7
