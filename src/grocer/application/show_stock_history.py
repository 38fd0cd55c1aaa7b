"""Application service: Show Stock History queries.

Read-only views over the stock journal, newest entry first.
"""

from __future__ import annotations

from datetime import date

from grocer.application.dto import Page, Pagination, StockJournalDTO, require_paging
from grocer.domain.exceptions import NotFoundError, ValidationError
from grocer.domain.model.actor import Actor
from grocer.domain.model.clock import day_window
from grocer.domain.model.stock_journal import StockJournalType
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory


class ShowStockHistoryHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def for_variant(
        self,
        actor: Actor,
        store_id: str,
        variant_id: str,
        page: int = 1,
        limit: int = 10,
        type: str | None = None,
    ) -> Page[StockJournalDTO]:
        actor.ensure_store_access(store_id)
        require_paging(page, limit)
        journal_type = StockJournalType.parse(type)

        with self._uow_factory() as uow:
            entries, total = uow.journal.list_for_variant(
                store_id, variant_id, page, limit, journal_type
            )

        return Page(
            items=[StockJournalDTO.from_entry(e) for e in entries],
            pagination=Pagination.build(page, limit, total),
        )

    def for_store(
        self,
        actor: Actor,
        store_id: str,
        page: int = 1,
        limit: int = 10,
        type: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Page[StockJournalDTO]:
        """Both dates are inclusive calendar days (UTC)."""
        actor.ensure_store_access(store_id)
        require_paging(page, limit)
        journal_type = StockJournalType.parse(type)
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must not be after end date")
        start, end = day_window(start_date, end_date)

        with self._uow_factory() as uow:
            entries, total = uow.journal.list_for_store(
                store_id, page, limit, journal_type, start, end
            )

        return Page(
            items=[StockJournalDTO.from_entry(e) for e in entries],
            pagination=Pagination.build(page, limit, total),
        )

    def by_id(self, actor: Actor, entry_id: int) -> StockJournalDTO:
        with self._uow_factory() as uow:
            entry = uow.journal.get(entry_id)

        if entry is None:
            raise NotFoundError("Stock journal not found")
        actor.ensure_store_access(entry.store_id)
        return StockJournalDTO.from_entry(entry)
