"""Application service: Cancel Order use case.

A customer may cancel their own order while it still awaits payment.
The reserved stock of every line is released in the same transaction,
and the status change is conditional so a concurrent expiry sweep
cannot release the same reservation a second time.
"""

from __future__ import annotations

import structlog

from grocer.application.dto import OrderDTO
from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.exceptions import NotFoundError, ValidationError
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.model.order import OrderStatus, PaymentStatus
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

CANCEL_NOTE = "Cancelled by customer"

logger = structlog.get_logger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock = utc_now,
        attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._attempts = attempts

    def handle(self, user_id: str, order_id: str) -> OrderDTO:

        def work(uow: UnitOfWork) -> OrderDTO:
            order = uow.orders.get(order_id)
            if order is None or order.user_id != user_id:
                raise NotFoundError("Order not found")

            entry = order.cancel(
                user_id, CANCEL_NOTE, self._clock(), PaymentStatus.CANCELLED
            )
            moved = uow.orders.transition_status(
                order.id,
                from_status=OrderStatus.PENDING_PAYMENT,
                to_status=OrderStatus.CANCELLED,
                payment_status=PaymentStatus.CANCELLED,
            )
            if not moved:
                raise ValidationError(
                    f"Cannot cancel order {order.order_number}: it is no longer awaiting payment"
                )

            uow.orders.add_history(order.id, entry)
            InventoryReservationService(uow).release_for_order(order)
            return OrderDTO.from_order(order)

        result = run_in_transaction(self._uow_factory, work, self._attempts)
        logger.info("order_cancelled", order_id=result.id, user_id=user_id)
        return result
