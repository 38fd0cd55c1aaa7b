"""Abstract unit of work: one database transaction plus its repositories.

Use as a context manager. Nothing is persisted unless ``commit()`` is
called; leaving the block without committing, or with an exception,
rolls back every write made through the repositories::

    with uow_factory() as uow:
        uow.inventory.increment_reserved(store_id, variant_id, 2)
        uow.commit()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from grocer.domain.repository.cart_repository import CartRepository
from grocer.domain.repository.catalog_repository import CatalogRepository
from grocer.domain.repository.inventory_repository import InventoryRepository
from grocer.domain.repository.order_repository import OrderRepository
from grocer.domain.repository.stock_journal_repository import StockJournalRepository


class UnitOfWork(ABC):
    inventory: InventoryRepository
    journal: StockJournalRepository
    orders: OrderRepository
    catalog: CatalogRepository
    carts: CartRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit permanent."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted writes. Safe to call after commit."""


UnitOfWorkFactory = Callable[[], UnitOfWork]
