"""Abstract repository for InventoryRecord rows.

Every mutation is a single conditional statement against the
(store, variant) row, so two concurrent writers can never both act on a
stale read. Implementations run inside the caller's unit of work and
never commit on their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from grocer.domain.model.inventory import InventoryRecord


class InventoryRepository(ABC):

    @abstractmethod
    def get(self, store_id: str, variant_id: str) -> InventoryRecord | None:
        """Return the record with catalog display detail, or None."""

    @abstractmethod
    def get_for_update(self, store_id: str, variant_id: str) -> InventoryRecord | None:
        """Return the record, row-locked until the unit of work ends."""

    @abstractmethod
    def create_if_missing(self, store_id: str, variant_id: str) -> bool:
        """Insert a zero row unless one exists. Return True if inserted.

        An existing row is never reset.
        """

    @abstractmethod
    def adjust_quantity(self, store_id: str, variant_id: str, delta: int) -> int | None:
        """Apply ``quantity += delta`` if the result stays >= ``reserved``.

        Return the new quantity, or None when the row is missing or the
        guard rejected the change.
        """

    @abstractmethod
    def increment_reserved(self, store_id: str, variant_id: str, quantity: int) -> bool:
        """Apply ``reserved += quantity`` only if ``quantity - reserved`` covers it."""

    @abstractmethod
    def decrement_reserved(self, store_id: str, variant_id: str, quantity: int) -> bool:
        """Apply ``reserved -= quantity`` only if ``reserved`` covers it."""

    @abstractmethod
    def list_for_store(
        self,
        store_id: str,
        page: int,
        limit: int,
        search: str | None = None,
    ) -> tuple[list[InventoryRecord], int]:
        """Return one page of a store's records and the total match count."""

    @abstractmethod
    def list_for_variant(self, variant_id: str) -> list[InventoryRecord]:
        """Return the variant's record in every store."""
