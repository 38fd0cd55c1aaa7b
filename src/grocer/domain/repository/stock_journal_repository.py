"""Abstract repository for the stock journal.

Append-only: there is deliberately no update or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from grocer.domain.model.stock_journal import StockJournalEntry, StockJournalType


class StockJournalRepository(ABC):

    @abstractmethod
    def add(self, entry: StockJournalEntry) -> StockJournalEntry:
        """Append an entry and return it with its assigned id."""

    @abstractmethod
    def get(self, entry_id: int) -> StockJournalEntry | None:
        """Return one entry with display detail, or None."""

    @abstractmethod
    def list_for_variant(
        self,
        store_id: str,
        variant_id: str,
        page: int,
        limit: int,
        type: StockJournalType | None = None,
    ) -> tuple[list[StockJournalEntry], int]:
        """Newest-first page of one (store, variant) ledger plus total count."""

    @abstractmethod
    def list_for_store(
        self,
        store_id: str,
        page: int,
        limit: int,
        type: StockJournalType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[list[StockJournalEntry], int]:
        """Newest-first page of a store's ledger plus total count.

        ``start`` is inclusive, ``end`` exclusive.
        """

    @abstractmethod
    def list_between(
        self, store_id: str, start: datetime, end: datetime
    ) -> list[StockJournalEntry]:
        """All entries of a store in ``[start, end)``, oldest first."""
