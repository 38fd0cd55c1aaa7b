"""SQLAlchemy implementation of StockJournalRepository (insert and read only)."""

from __future__ import annotations

import dataclasses
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Session

from grocer.domain.model.clock import as_utc
from grocer.domain.model.stock_journal import StockJournalEntry, StockJournalType
from grocer.domain.repository.stock_journal_repository import StockJournalRepository
from grocer.infrastructure.persistence.orm import ProductVariantRow, StockJournalRow, StoreRow
from grocer.infrastructure.persistence.paging import paginate


class SqlStockJournalRepository(StockJournalRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- StockJournalRepository interface -------------------------------------

    def add(self, entry: StockJournalEntry) -> StockJournalEntry:
        row = StockJournalRow(
            store_id=entry.store_id,
            variant_id=entry.variant_id,
            type=entry.type.value,
            quantity=entry.quantity,
            stock_before=entry.stock_before,
            stock_after=entry.stock_after,
            reference_no=entry.reference_no,
            reason=entry.reason,
            notes=entry.notes,
            created_by=entry.created_by,
            order_id=entry.order_id,
            created_at=as_utc(entry.created_at),
        )
        self._session.add(row)
        self._session.flush()
        return dataclasses.replace(entry, id=row.id)

    def get(self, entry_id: int) -> StockJournalEntry | None:
        row = self._session.execute(
            self._detail_query().where(StockJournalRow.id == entry_id)
        ).one_or_none()
        return self._to_domain(row) if row else None

    def list_for_variant(
        self,
        store_id: str,
        variant_id: str,
        page: int,
        limit: int,
        type: StockJournalType | None = None,
    ) -> tuple[list[StockJournalEntry], int]:
        stmt = self._detail_query().where(
            StockJournalRow.store_id == store_id,
            StockJournalRow.variant_id == variant_id,
        )
        if type is not None:
            stmt = stmt.where(StockJournalRow.type == type.value)

        rows, total = paginate(self._session, self._newest_first(stmt), page, limit)
        return [self._to_domain(r) for r in rows], total

    def list_for_store(
        self,
        store_id: str,
        page: int,
        limit: int,
        type: StockJournalType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[list[StockJournalEntry], int]:
        stmt = self._detail_query().where(StockJournalRow.store_id == store_id)
        if type is not None:
            stmt = stmt.where(StockJournalRow.type == type.value)
        if start is not None:
            stmt = stmt.where(StockJournalRow.created_at >= as_utc(start))
        if end is not None:
            stmt = stmt.where(StockJournalRow.created_at < as_utc(end))

        rows, total = paginate(self._session, self._newest_first(stmt), page, limit)
        return [self._to_domain(r) for r in rows], total

    def list_between(
        self, store_id: str, start: datetime, end: datetime
    ) -> list[StockJournalEntry]:
        rows = self._session.execute(
            self._detail_query()
            .where(
                StockJournalRow.store_id == store_id,
                StockJournalRow.created_at >= as_utc(start),
                StockJournalRow.created_at < as_utc(end),
            )
            .order_by(StockJournalRow.created_at, StockJournalRow.id)
        ).all()
        return [self._to_domain(r) for r in rows]

    # --- Queries --------------------------------------------------------------

    @staticmethod
    def _detail_query() -> sa.Select:
        return (
            sa.select(
                StockJournalRow,
                ProductVariantRow.product_name,
                ProductVariantRow.name,
                ProductVariantRow.sku,
                StoreRow.name,
            )
            .join(ProductVariantRow, ProductVariantRow.id == StockJournalRow.variant_id)
            .join(StoreRow, StoreRow.id == StockJournalRow.store_id)
        )

    @staticmethod
    def _newest_first(stmt: sa.Select) -> sa.Select:
        return stmt.order_by(StockJournalRow.created_at.desc(), StockJournalRow.id.desc())

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_domain(row: sa.Row) -> StockJournalEntry:
        journal, product_name, variant_name, sku, store_name = row
        return StockJournalEntry(
            id=journal.id,
            store_id=journal.store_id,
            variant_id=journal.variant_id,
            type=StockJournalType(journal.type),
            quantity=journal.quantity,
            stock_before=journal.stock_before,
            stock_after=journal.stock_after,
            reference_no=journal.reference_no,
            reason=journal.reason,
            notes=journal.notes,
            created_by=journal.created_by,
            created_at=as_utc(journal.created_at),
            order_id=journal.order_id,
            product_name=product_name,
            variant_name=variant_name,
            sku=sku,
            store_name=store_name,
        )
