"""InventoryRecord: stock and reservations per (store, variant).

Each store holds one InventoryRecord per product variant. ``quantity`` is
the physical stock the store owns; ``reserved`` is the part of it
earmarked for orders that are still waiting for payment.

The two counters are changed by separate code paths: stock IN/OUT moves
``quantity`` (always paired with a journal entry), reservations move
``reserved``. ``available`` is always derived, never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from grocer.domain.exceptions import ValidationError


@dataclass
class InventoryRecord:
    """Current stock state of one variant in one store.

    Invariants:
    - ``quantity`` >= 0
    - 0 <= ``reserved`` <= ``quantity``
    """

    store_id: str
    variant_id: str
    quantity: int = 0
    reserved: int = 0
    updated_at: datetime | None = None

    # Display detail, filled in by queries that join the catalog.
    product_name: str | None = None
    variant_name: str | None = None
    sku: str | None = None
    store_name: str | None = None

    @property
    def available(self) -> int:
        return self.quantity - self.reserved

    def can_supply(self, quantity: int) -> bool:
        return self.available >= quantity


@dataclass(frozen=True)
class StockAvailability:
    """Answer to "can this store sell N units of this variant right now?"."""

    available: bool
    reason: str
    inventory: InventoryRecord | None = None

    @staticmethod
    def evaluate(record: InventoryRecord | None, requested: int) -> StockAvailability:
        if record is None:
            return StockAvailability(
                available=False,
                reason="Product not available in this store",
            )
        if not record.can_supply(requested):
            return StockAvailability(
                available=False,
                reason=(
                    f"Insufficient stock. Available: {record.available}, "
                    f"Requested: {requested}"
                ),
                inventory=record,
            )
        return StockAvailability(available=True, reason="Stock available", inventory=record)


def require_positive_quantity(quantity: int, what: str = "Quantity") -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"{what} must be an integer")
    if quantity <= 0:
        raise ValidationError(f"{what} must be greater than 0")
