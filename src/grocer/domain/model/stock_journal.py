"""Stock journal: the append-only ledger of physical stock changes.

Every change to ``InventoryRecord.quantity`` is recorded as exactly one
StockJournalEntry holding the quantity before and after the change. Entries
are never updated or deleted; replaying them in creation order explains how
the current quantity was reached.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from grocer.domain.exceptions import ValidationError
from grocer.domain.model.inventory import require_positive_quantity

MIN_REASON_LENGTH = 5


class StockJournalType(Enum):
    IN = "IN"
    OUT = "OUT"

    @staticmethod
    def parse(raw: str | None) -> StockJournalType | None:
        """Parse an optional filter value; empty means "any type"."""
        if not raw:
            return None
        try:
            return StockJournalType(raw.strip().upper())
        except ValueError:
            raise ValidationError("Type must be IN or OUT") from None


def validate_movement(quantity: int, reference_no: str | None, reason: str | None) -> None:
    require_positive_quantity(quantity)

    if not reference_no or not reference_no.strip():
        raise ValidationError("Reference number is required")

    if not reason or len(reason.strip()) < MIN_REASON_LENGTH:
        raise ValidationError(
            f"Reason must be at least {MIN_REASON_LENGTH} characters"
        )


@dataclass(frozen=True)
class StockMovement:
    """A validated request to move stock, before it is applied."""

    store_id: str
    variant_id: str
    type: StockJournalType
    quantity: int
    reference_no: str
    reason: str
    notes: str | None = None

    @property
    def delta(self) -> int:
        return self.quantity if self.type == StockJournalType.IN else -self.quantity

    @staticmethod
    def create(
        store_id: str,
        variant_id: str,
        type: StockJournalType,
        quantity: int,
        reference_no: str | None,
        reason: str | None,
        notes: str | None = None,
    ) -> StockMovement:
        """Validate the raw input and return a movement with trimmed text."""
        if not store_id or not variant_id:
            raise ValidationError("Store and product variant are required")
        validate_movement(quantity, reference_no, reason)

        cleaned_notes = notes.strip() if notes else None
        return StockMovement(
            store_id=store_id,
            variant_id=variant_id,
            type=type,
            quantity=quantity,
            reference_no=reference_no.strip(),
            reason=reason.strip(),
            notes=cleaned_notes or None,
        )


@dataclass
class StockJournalEntry:
    """One immutable ledger line.

    ``stock_before`` / ``stock_after`` snapshot ``quantity`` (not
    ``reserved``) around this change.
    """

    id: int | None
    store_id: str
    variant_id: str
    type: StockJournalType
    quantity: int
    stock_before: int
    stock_after: int
    reference_no: str
    reason: str
    created_by: str
    created_at: datetime
    notes: str | None = None
    order_id: str | None = None

    # Display detail, filled in on read.
    product_name: str | None = None
    variant_name: str | None = None
    sku: str | None = None
    store_name: str | None = None

    @property
    def is_consistent(self) -> bool:
        if self.type == StockJournalType.IN:
            return self.stock_after == self.stock_before + self.quantity
        return self.stock_after == self.stock_before - self.quantity

    @staticmethod
    def record(
        movement: StockMovement,
        stock_after: int,
        created_by: str,
        created_at: datetime,
        order_id: str | None = None,
    ) -> StockJournalEntry:
        """Build the entry for a movement from the post-change quantity."""
        return StockJournalEntry(
            id=None,
            store_id=movement.store_id,
            variant_id=movement.variant_id,
            type=movement.type,
            quantity=movement.quantity,
            stock_before=stock_after - movement.delta,
            stock_after=stock_after,
            reference_no=movement.reference_no,
            reason=movement.reason,
            notes=movement.notes,
            created_by=created_by,
            created_at=created_at,
            order_id=order_id,
        )


# ---------------------------------------------------------------------------
# Monthly summary
# ---------------------------------------------------------------------------


@dataclass
class MonthlySummaryLine:
    variant_id: str
    product_name: str | None
    variant_name: str | None
    stock_start: int
    total_in: int = 0
    total_out: int = 0
    stock_end: int = 0


def summarize_journal(entries: list[StockJournalEntry]) -> list[MonthlySummaryLine]:
    """Fold time-ordered entries into one summary line per variant.

    ``stock_start`` is the ``stock_before`` of a variant's first entry,
    ``stock_end`` the ``stock_after`` of its last. Variants keep the order
    in which they first appear.
    """
    lines: dict[str, MonthlySummaryLine] = {}

    for entry in entries:
        line = lines.get(entry.variant_id)
        if line is None:
            line = MonthlySummaryLine(
                variant_id=entry.variant_id,
                product_name=entry.product_name,
                variant_name=entry.variant_name,
                stock_start=entry.stock_before,
            )
            lines[entry.variant_id] = line

        if entry.type == StockJournalType.IN:
            line.total_in += entry.quantity
        else:
            line.total_out += entry.quantity
        line.stock_end = entry.stock_after

    return list(lines.values())
