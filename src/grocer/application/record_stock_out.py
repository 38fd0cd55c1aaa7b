"""Application service: Record Stock OUT use case (damage, loss, correction).

Fails with InsufficientStockError when the store does not hold enough
unreserved stock; in that case nothing is written.
"""

from __future__ import annotations

from grocer.application.dto import StockJournalDTO
from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.model.actor import Actor
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.stock_mutation_service import StockMutationService


class RecordStockOutHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock = utc_now,
        attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._attempts = attempts

    def handle(
        self,
        actor: Actor,
        store_id: str,
        variant_id: str,
        quantity: int,
        reference_no: str | None,
        reason: str | None,
        notes: str | None = None,
    ) -> StockJournalDTO:
        actor.ensure_store_access(store_id)

        def work(uow: UnitOfWork) -> StockJournalDTO:
            entry = StockMutationService(uow, self._clock).record_stock_out(
                store_id=store_id,
                variant_id=variant_id,
                quantity=quantity,
                reference_no=reference_no,
                reason=reason,
                actor_id=actor.user_id,
                notes=notes,
            )
            return StockJournalDTO.from_entry(uow.journal.get(entry.id) or entry)

        return run_in_transaction(self._uow_factory, work, self._attempts)
