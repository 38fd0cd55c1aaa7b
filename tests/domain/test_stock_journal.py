"""Unit tests for stock movements, journal entries and the summary fold."""

from datetime import datetime, timedelta, timezone

import pytest

from grocer.domain.exceptions import ValidationError
from grocer.domain.model.stock_journal import (
    StockJournalEntry,
    StockJournalType,
    StockMovement,
    summarize_journal,
    validate_movement,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _entry(variant_id: str, type_: StockJournalType, qty: int, before: int, minute: int = 0):
    after = before + qty if type_ == StockJournalType.IN else before - qty
    return StockJournalEntry(
        id=None,
        store_id="s1",
        variant_id=variant_id,
        type=type_,
        quantity=qty,
        stock_before=before,
        stock_after=after,
        reference_no="REF",
        reason="Restock",
        created_by="admin",
        created_at=T0 + timedelta(minutes=minute),
        product_name=f"Product {variant_id}",
        variant_name="Default",
    )


class TestValidateMovement:

    def test_valid_input_passes(self):
        validate_movement(1, "PO-1", "Restock")

    @pytest.mark.parametrize("qty", [0, -5])
    def test_non_positive_quantity_rejected(self, qty):
        with pytest.raises(ValidationError, match="greater than 0"):
            validate_movement(qty, "PO-1", "Restock")

    @pytest.mark.parametrize("ref", [None, "", "   "])
    def test_reference_required(self, ref):
        with pytest.raises(ValidationError, match="Reference number is required"):
            validate_movement(1, ref, "Restock")

    @pytest.mark.parametrize("reason", [None, "", "abcd", "  ab  "])
    def test_reason_too_short(self, reason):
        with pytest.raises(ValidationError, match="at least 5 characters"):
            validate_movement(1, "PO-1", reason)


class TestStockMovement:

    def test_text_is_trimmed(self):
        m = StockMovement.create("s1", "v1", StockJournalType.IN, 3, " PO-1 ", "  Restock  ", "  ")
        assert m.reference_no == "PO-1"
        assert m.reason == "Restock"
        assert m.notes is None

    def test_delta_sign_follows_type(self):
        m_in = StockMovement.create("s1", "v1", StockJournalType.IN, 3, "PO-1", "Restock")
        m_out = StockMovement.create("s1", "v1", StockJournalType.OUT, 3, "DMG-1", "Damaged")
        assert m_in.delta == 3
        assert m_out.delta == -3

    def test_missing_ids_rejected(self):
        with pytest.raises(ValidationError, match="Store and product variant"):
            StockMovement.create("", "v1", StockJournalType.IN, 3, "PO-1", "Restock")


class TestStockJournalEntry:

    def test_record_derives_before_from_after(self):
        m = StockMovement.create("s1", "v1", StockJournalType.OUT, 4, "DMG-1", "Damaged")
        entry = StockJournalEntry.record(m, stock_after=6, created_by="admin", created_at=T0)
        assert entry.stock_before == 10
        assert entry.stock_after == 6
        assert entry.is_consistent

    def test_inconsistent_entry_detected(self):
        entry = _entry("v1", StockJournalType.IN, 5, before=10)
        entry.stock_after = 14
        assert not entry.is_consistent


class TestStockJournalTypeParse:

    def test_empty_means_any(self):
        assert StockJournalType.parse(None) is None
        assert StockJournalType.parse("") is None

    def test_case_insensitive(self):
        assert StockJournalType.parse("out") == StockJournalType.OUT

    def test_unknown_rejected(self):
        with pytest.raises(ValidationError, match="Type must be IN or OUT"):
            StockJournalType.parse("MOVE")


class TestSummarizeJournal:

    def test_fold_over_one_variant(self):
        # 10 -> 15 -> 12 -> 20
        entries = [
            _entry("v1", StockJournalType.IN, 5, before=10, minute=0),
            _entry("v1", StockJournalType.OUT, 3, before=15, minute=1),
            _entry("v1", StockJournalType.IN, 8, before=12, minute=2),
        ]
        [line] = summarize_journal(entries)
        assert line.stock_start == 10
        assert line.total_in == 13
        assert line.total_out == 3
        assert line.stock_end == 20

    def test_variants_keep_first_seen_order(self):
        entries = [
            _entry("v2", StockJournalType.IN, 1, before=0, minute=0),
            _entry("v1", StockJournalType.IN, 1, before=0, minute=1),
            _entry("v2", StockJournalType.OUT, 1, before=1, minute=2),
        ]
        lines = summarize_journal(entries)
        assert [line.variant_id for line in lines] == ["v2", "v1"]
        assert lines[0].stock_end == 0
        assert lines[0].product_name == "Product v2"

    def test_empty_journal(self):
        assert summarize_journal([]) == []
