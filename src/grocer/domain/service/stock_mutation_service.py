"""Domain service: Stock Mutation.

Applies a stock IN or OUT to ``InventoryRecord.quantity`` and appends the
matching journal entry. Both writes go through the caller's unit of work,
so they commit together or not at all.

The quantity change is one conditional UPDATE. ``stock_after`` is the
value that statement produced and ``stock_before`` is derived from it,
which keeps the snapshot exact even when other writers touch the same
row concurrently.
"""

from __future__ import annotations

import structlog

from grocer.domain.exceptions import InsufficientStockError, NotFoundError
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.model.stock_journal import (
    StockJournalEntry,
    StockJournalType,
    StockMovement,
)
from grocer.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class StockMutationService:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def record_stock_in(
        self,
        store_id: str,
        variant_id: str,
        quantity: int,
        reference_no: str | None,
        reason: str | None,
        actor_id: str,
        notes: str | None = None,
    ) -> StockJournalEntry:
        """Add physical stock, creating the inventory row on first use."""
        movement = StockMovement.create(
            store_id, variant_id, StockJournalType.IN, quantity, reference_no, reason, notes
        )
        self._require_catalog_entries(store_id, variant_id)

        self._uow.inventory.create_if_missing(store_id, variant_id)
        stock_after = self._uow.inventory.adjust_quantity(
            store_id, variant_id, movement.delta
        )
        if stock_after is None:
            raise NotFoundError("Inventory not found")

        return self._append(movement, stock_after, actor_id)

    def record_stock_out(
        self,
        store_id: str,
        variant_id: str,
        quantity: int,
        reference_no: str | None,
        reason: str | None,
        actor_id: str,
        notes: str | None = None,
    ) -> StockJournalEntry:
        """Remove physical stock. Never touches ``reserved``.

        Units reserved for unpaid orders cannot be taken out, so the
        guard is ``quantity - n >= reserved``.
        """
        movement = StockMovement.create(
            store_id, variant_id, StockJournalType.OUT, quantity, reference_no, reason, notes
        )

        stock_after = self._uow.inventory.adjust_quantity(
            store_id, variant_id, movement.delta
        )
        if stock_after is None:
            # Locked so the counters reported below cannot move first.
            current = self._uow.inventory.get_for_update(store_id, variant_id)
            if current is None:
                raise NotFoundError(
                    "Inventory not found. Cannot perform stock OUT on non-existent inventory."
                )
            logger.info(
                "stock_out_rejected",
                store_id=store_id,
                variant_id=variant_id,
                requested=quantity,
                available=current.available,
            )
            raise InsufficientStockError(
                available=current.available, requested=quantity
            )

        return self._append(movement, stock_after, actor_id)

    # --- Internal helpers -----------------------------------------------------

    def _require_catalog_entries(self, store_id: str, variant_id: str) -> None:
        if self._uow.catalog.get_store(store_id) is None:
            raise NotFoundError(f"Store '{store_id}' not found")
        if self._uow.catalog.get_variant(variant_id) is None:
            raise NotFoundError(f"Product variant '{variant_id}' not found")

    def _append(
        self, movement: StockMovement, stock_after: int, actor_id: str
    ) -> StockJournalEntry:
        entry = StockJournalEntry.record(
            movement,
            stock_after=stock_after,
            created_by=actor_id,
            created_at=self._clock(),
        )
        saved = self._uow.journal.add(entry)
        logger.info(
            "stock_movement_recorded",
            journal_id=saved.id,
            type=movement.type.value,
            store_id=movement.store_id,
            variant_id=movement.variant_id,
            quantity=movement.quantity,
            stock_before=saved.stock_before,
            stock_after=saved.stock_after,
            actor_id=actor_id,
        )
        return saved
