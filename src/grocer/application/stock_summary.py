"""Application service: Monthly Stock Summary report.

Folds the store's journal inside a date window into one line per variant
(stock at start, total in, total out, stock at end). Nothing is
materialized; the report is recomputed from the ledger on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from grocer.application.dto import MonthlySummaryDTO, Pagination, require_paging
from grocer.domain.exceptions import NotFoundError, ValidationError
from grocer.domain.model.actor import Actor
from grocer.domain.model.clock import day_window
from grocer.domain.model.stock_journal import summarize_journal
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory


@dataclass(frozen=True)
class MonthlySummaryReport:
    store_id: str
    store_name: str
    start_date: str
    end_date: str
    lines: list[MonthlySummaryDTO]
    pagination: Pagination


class MonthlySummaryHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        actor: Actor,
        store_id: str,
        start_date: date,
        end_date: date,
        page: int = 1,
        limit: int = 10,
    ) -> MonthlySummaryReport:
        """Summarize ``[start_date, end_date]``, both days inclusive."""
        actor.ensure_store_access(store_id)
        require_paging(page, limit)
        if start_date > end_date:
            raise ValidationError("Start date must not be after end date")
        start, end = day_window(start_date, end_date)

        with self._uow_factory() as uow:
            store = uow.catalog.get_store(store_id)
            if store is None:
                raise NotFoundError(f"Store '{store_id}' not found")
            entries = uow.journal.list_between(store_id, start, end)

        lines = summarize_journal(entries)
        offset = (page - 1) * limit

        return MonthlySummaryReport(
            store_id=store.id,
            store_name=store.name,
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            lines=[MonthlySummaryDTO.from_line(line) for line in lines[offset : offset + limit]],
            pagination=Pagination.build(page, limit, len(lines)),
        )
