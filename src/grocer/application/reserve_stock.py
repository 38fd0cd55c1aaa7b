"""Application service: Reserve Stock use case.

Internal-use entry point for earmarking stock outside of checkout. The
order flow calls the reservation service directly inside its own
transaction instead.
"""

from __future__ import annotations

from grocer.application.dto import InventoryDTO
from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.exceptions import NotFoundError
from grocer.domain.model.actor import Actor
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)


class ReserveStockHandler:

    def __init__(
        self, uow_factory: UnitOfWorkFactory, attempts: int = DEFAULT_ATTEMPTS
    ) -> None:
        self._uow_factory = uow_factory
        self._attempts = attempts

    def handle(self, actor: Actor, store_id: str, variant_id: str, quantity: int) -> InventoryDTO:
        actor.ensure_store_access(store_id)

        def work(uow: UnitOfWork) -> InventoryDTO:
            InventoryReservationService(uow).reserve_stock(store_id, variant_id, quantity)
            record = uow.inventory.get(store_id, variant_id)
            if record is None:
                raise NotFoundError("Inventory not found")
            return InventoryDTO.from_record(record)

        return run_in_transaction(self._uow_factory, work, self._attempts)
