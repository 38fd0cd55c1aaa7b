"""Application service: Initialize Inventory use case.

Run once when a variant is introduced so every active store has an
addressable stock row. Safe to repeat.
"""

from __future__ import annotations

from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.model.actor import Actor, ActorRole
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)


class InitializeInventoryHandler:

    def __init__(
        self, uow_factory: UnitOfWorkFactory, attempts: int = DEFAULT_ATTEMPTS
    ) -> None:
        self._uow_factory = uow_factory
        self._attempts = attempts

    def handle(self, actor: Actor, variant_id: str) -> int:
        """Return the number of active stores that now hold a row."""
        actor.require_role(ActorRole.SUPER_ADMIN)
        return run_in_transaction(
            self._uow_factory,
            lambda uow: InventoryReservationService(uow).initialize_inventory_for_variant(
                variant_id
            ),
            self._attempts,
        )
