"""Abstract repository for catalog collaborators the core reads.

Stores, variants and addresses are owned by other modules; the ``add_*``
methods exist for seeding only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from grocer.domain.model.catalog import Address, ProductVariant, Store


class CatalogRepository(ABC):

    @abstractmethod
    def get_store(self, store_id: str) -> Store | None: ...

    @abstractmethod
    def list_active_stores(self) -> list[Store]: ...

    @abstractmethod
    def get_variant(self, variant_id: str) -> ProductVariant | None: ...

    @abstractmethod
    def get_address(self, address_id: str) -> Address | None: ...

    @abstractmethod
    def save_store(self, store: Store) -> None:
        """Insert or update a store."""

    @abstractmethod
    def save_variant(self, variant: ProductVariant) -> None:
        """Insert or update a product variant."""

    @abstractmethod
    def save_address(self, address: Address) -> None:
        """Insert or update an address."""
