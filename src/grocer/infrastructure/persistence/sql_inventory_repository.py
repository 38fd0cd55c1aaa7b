"""SQLAlchemy implementation of InventoryRepository.

Mutations are Core UPDATE statements whose WHERE clause carries the
business guard, e.g. ``reserved = reserved + n WHERE quantity - reserved
>= n``. The database evaluates guard and write under the row's write
lock, so concurrent callers serialize on the row and a stale read can
never slip through. ``rowcount`` tells whether the guard held.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from grocer.domain.model.clock import Clock, as_utc, utc_now
from grocer.domain.model.inventory import InventoryRecord
from grocer.domain.repository.inventory_repository import InventoryRepository
from grocer.infrastructure.persistence.orm import InventoryRow, ProductVariantRow, StoreRow
from grocer.infrastructure.persistence.paging import paginate

_inventories = InventoryRow.__table__

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlInventoryRepository(InventoryRepository):

    def __init__(self, session: Session, clock: Clock = utc_now) -> None:
        self._session = session
        self._clock = clock

    # --- Reads ----------------------------------------------------------------

    def get(self, store_id: str, variant_id: str) -> InventoryRecord | None:
        row = self._session.execute(
            self._detail_query().where(
                InventoryRow.store_id == store_id,
                InventoryRow.variant_id == variant_id,
            )
        ).one_or_none()
        return self._to_domain(row) if row else None

    def get_for_update(self, store_id: str, variant_id: str) -> InventoryRecord | None:
        # FOR UPDATE is dropped by dialects without row locks (SQLite
        # serializes writers on the database lock instead).
        row = self._session.execute(
            self._detail_query()
            .where(
                InventoryRow.store_id == store_id,
                InventoryRow.variant_id == variant_id,
            )
            .with_for_update(of=InventoryRow)
        ).one_or_none()
        return self._to_domain(row) if row else None

    def list_for_store(
        self,
        store_id: str,
        page: int,
        limit: int,
        search: str | None = None,
    ) -> tuple[list[InventoryRecord], int]:
        stmt = self._detail_query().where(InventoryRow.store_id == store_id)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                sa.or_(
                    sa.func.lower(ProductVariantRow.product_name).like(pattern),
                    sa.func.lower(ProductVariantRow.name).like(pattern),
                    sa.func.lower(ProductVariantRow.sku).like(pattern),
                )
            )
        stmt = stmt.order_by(ProductVariantRow.product_name, ProductVariantRow.name)

        rows, total = paginate(self._session, stmt, page, limit)
        return [self._to_domain(r) for r in rows], total

    def list_for_variant(self, variant_id: str) -> list[InventoryRecord]:
        rows = self._session.execute(
            self._detail_query()
            .where(InventoryRow.variant_id == variant_id)
            .order_by(StoreRow.name)
        ).all()
        return [self._to_domain(r) for r in rows]

    # --- Guarded writes -------------------------------------------------------

    def create_if_missing(self, store_id: str, variant_id: str) -> bool:
        values = {
            "store_id": store_id,
            "variant_id": variant_id,
            "quantity": 0,
            "reserved": 0,
            "updated_at": as_utc(self._clock()),
        }
        insert = _UPSERT_INSERTS.get(self._session.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(_inventories).values(**values).on_conflict_do_nothing(
                index_elements=["store_id", "variant_id"]
            )
            return self._session.execute(stmt).rowcount == 1

        exists = self._session.execute(
            sa.select(_inventories.c.id).where(
                _inventories.c.store_id == store_id,
                _inventories.c.variant_id == variant_id,
            )
        ).first()
        if exists:
            return False
        self._session.execute(sa.insert(_inventories).values(**values))
        return True

    def adjust_quantity(self, store_id: str, variant_id: str, delta: int) -> int | None:
        c = _inventories.c
        updated = self._guarded_update(
            store_id,
            variant_id,
            guard=c.quantity + delta >= c.reserved,
            quantity=c.quantity + delta,
        )
        if not updated:
            return None
        # Still inside the write lock taken by the UPDATE.
        return self._session.execute(
            sa.select(c.quantity).where(c.store_id == store_id, c.variant_id == variant_id)
        ).scalar_one()

    def increment_reserved(self, store_id: str, variant_id: str, quantity: int) -> bool:
        c = _inventories.c
        return self._guarded_update(
            store_id,
            variant_id,
            guard=c.quantity - c.reserved >= quantity,
            reserved=c.reserved + quantity,
        )

    def decrement_reserved(self, store_id: str, variant_id: str, quantity: int) -> bool:
        c = _inventories.c
        return self._guarded_update(
            store_id,
            variant_id,
            guard=c.reserved >= quantity,
            reserved=c.reserved - quantity,
        )

    # --- Internal helpers -----------------------------------------------------

    def _guarded_update(self, store_id: str, variant_id: str, guard, **values) -> bool:
        stmt = (
            sa.update(_inventories)
            .where(
                _inventories.c.store_id == store_id,
                _inventories.c.variant_id == variant_id,
                guard,
            )
            .values(updated_at=as_utc(self._clock()), **values)
        )
        return self._session.execute(stmt).rowcount == 1

    @staticmethod
    def _detail_query() -> sa.Select:
        return (
            sa.select(
                InventoryRow,
                ProductVariantRow.product_name,
                ProductVariantRow.name,
                ProductVariantRow.sku,
                StoreRow.name,
            )
            .join(ProductVariantRow, ProductVariantRow.id == InventoryRow.variant_id)
            .join(StoreRow, StoreRow.id == InventoryRow.store_id)
            # Rows may have been changed by Core UPDATEs in this session.
            .execution_options(populate_existing=True)
        )

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_domain(row: sa.Row) -> InventoryRecord:
        inventory, product_name, variant_name, sku, store_name = row
        return InventoryRecord(
            store_id=inventory.store_id,
            variant_id=inventory.variant_id,
            quantity=inventory.quantity,
            reserved=inventory.reserved,
            updated_at=as_utc(inventory.updated_at) if inventory.updated_at else None,
            product_name=product_name,
            variant_name=variant_name,
            sku=sku,
            store_name=store_name,
        )
