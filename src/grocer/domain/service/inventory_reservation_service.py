"""Domain service: Inventory Reservation.

Manages the ``reserved`` counter of InventoryRecord independently from
``quantity``. Reserving and releasing are single conditional UPDATEs, so
the availability check and the increment cannot be split by a concurrent
request: of two checkouts racing for the last unit, exactly one matches
the guard.

Order-level operations simply loop the per-line primitives inside the
caller's unit of work. If any line fails the exception aborts the unit
and every earlier increment is rolled back with it.
"""

from __future__ import annotations

import structlog

from grocer.domain.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ReservationUnderflowError,
)
from grocer.domain.model.inventory import StockAvailability, require_positive_quantity
from grocer.domain.model.order import Order
from grocer.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)

NOT_IN_STORE = "Product not available in this store"


class InventoryReservationService:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def check_stock_availability(
        self, store_id: str, variant_id: str, requested: int
    ) -> StockAvailability:
        """Pure read: can the store hand out ``requested`` units right now?"""
        require_positive_quantity(requested)
        record = self._uow.inventory.get(store_id, variant_id)
        return StockAvailability.evaluate(record, requested)

    def reserve_stock(self, store_id: str, variant_id: str, quantity: int) -> None:
        require_positive_quantity(quantity)

        if self._uow.inventory.increment_reserved(store_id, variant_id, quantity):
            logger.info(
                "stock_reserved",
                store_id=store_id,
                variant_id=variant_id,
                quantity=quantity,
            )
            return

        # Guard rejected the increment; read back only to explain why.
        record = self._uow.inventory.get(store_id, variant_id)
        if record is None:
            raise InsufficientStockError(
                available=0, requested=quantity, message=NOT_IN_STORE
            )
        raise InsufficientStockError(available=record.available, requested=quantity)

    def release_reserved_stock(self, store_id: str, variant_id: str, quantity: int) -> None:
        """Give reserved units back to ``available``.

        Releasing more than is reserved means some earlier release or
        reservation went missing. It is refused and logged as an error
        instead of being clamped.
        """
        require_positive_quantity(quantity)

        if self._uow.inventory.decrement_reserved(store_id, variant_id, quantity):
            logger.info(
                "stock_released",
                store_id=store_id,
                variant_id=variant_id,
                quantity=quantity,
            )
            return

        record = self._uow.inventory.get_for_update(store_id, variant_id)
        if record is None:
            raise NotFoundError("Inventory not found")
        logger.error(
            "reservation_underflow",
            store_id=store_id,
            variant_id=variant_id,
            reserved=record.reserved,
            requested=quantity,
        )
        raise ReservationUnderflowError(reserved=record.reserved, requested=quantity)

    def initialize_inventory_for_variant(self, variant_id: str) -> int:
        """Make sure every active store has a (possibly zero) row for the variant.

        Idempotent; existing rows keep their counters. Returns the number
        of stores addressed.
        """
        if self._uow.catalog.get_variant(variant_id) is None:
            raise NotFoundError(f"Product variant '{variant_id}' not found")

        stores = self._uow.catalog.list_active_stores()
        created = 0
        for store in stores:
            if self._uow.inventory.create_if_missing(store.id, variant_id):
                created += 1

        logger.info(
            "inventory_initialized",
            variant_id=variant_id,
            stores=len(stores),
            created=created,
        )
        return len(stores)

    def reserve_for_order(self, order: Order) -> None:
        """Reserve every line item of the order at the order's store."""
        for item in order.items:
            self.reserve_stock(order.store_id, item.variant_id, item.quantity.value)

    def release_for_order(self, order: Order) -> None:
        """Release every line item reserved by ``reserve_for_order``."""
        for item in order.items:
            self.release_reserved_stock(
                order.store_id, item.variant_id, item.quantity.value
            )
