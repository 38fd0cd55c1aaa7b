"""SQLAlchemy implementation of CatalogRepository."""

from __future__ import annotations

from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.orm import Session

from grocer.domain.model.catalog import Address, ProductVariant, Store
from grocer.domain.model.value_objects import Money
from grocer.domain.repository.catalog_repository import CatalogRepository
from grocer.infrastructure.persistence.orm import AddressRow, ProductVariantRow, StoreRow


class SqlCatalogRepository(CatalogRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_store(self, store_id: str) -> Store | None:
        row = self._session.get(StoreRow, store_id)
        return self._store(row) if row else None

    def list_active_stores(self) -> list[Store]:
        rows = self._session.execute(
            sa.select(StoreRow).where(StoreRow.is_active.is_(True)).order_by(StoreRow.id)
        ).scalars()
        return [self._store(r) for r in rows]

    def get_variant(self, variant_id: str) -> ProductVariant | None:
        row = self._session.get(ProductVariantRow, variant_id)
        if row is None:
            return None
        return ProductVariant(
            id=row.id,
            product_name=row.product_name,
            name=row.name,
            sku=row.sku,
            price=Money(Decimal(row.price)),
            is_active=row.is_active,
        )

    def get_address(self, address_id: str) -> Address | None:
        row = self._session.get(AddressRow, address_id)
        if row is None:
            return None
        return Address(id=row.id, user_id=row.user_id, label=row.label, city=row.city)

    def save_store(self, store: Store) -> None:
        self._session.merge(
            StoreRow(id=store.id, name=store.name, city=store.city, is_active=store.is_active)
        )
        self._session.flush()

    def save_variant(self, variant: ProductVariant) -> None:
        self._session.merge(
            ProductVariantRow(
                id=variant.id,
                product_name=variant.product_name,
                name=variant.name,
                sku=variant.sku,
                price=variant.price.minor_units,
                is_active=variant.is_active,
            )
        )
        self._session.flush()

    def save_address(self, address: Address) -> None:
        self._session.merge(
            AddressRow(
                id=address.id,
                user_id=address.user_id,
                label=address.label,
                city=address.city,
            )
        )
        self._session.flush()

    @staticmethod
    def _store(row: StoreRow) -> Store:
        return Store(id=row.id, name=row.name, city=row.city, is_active=row.is_active)
