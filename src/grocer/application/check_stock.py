"""Application service: Check Stock Availability use case (query)."""

from __future__ import annotations

from grocer.application.dto import AvailabilityDTO, InventoryDTO
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)


class CheckStockHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, store_id: str, variant_id: str, quantity: int = 1) -> AvailabilityDTO:
        with self._uow_factory() as uow:
            result = InventoryReservationService(uow).check_stock_availability(
                store_id, variant_id, quantity
            )

        return AvailabilityDTO(
            available=result.available,
            reason=result.reason,
            inventory=InventoryDTO.from_record(result.inventory) if result.inventory else None,
        )
