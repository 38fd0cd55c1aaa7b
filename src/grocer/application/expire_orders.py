"""Application service: Expire Unpaid Orders sweep.

Meant to be run periodically (cron, ``grocer order expire``). Each
expired order is handled in its own transaction that starts with a
conditional status change; a second sweep running at the same time
finds the order already moved and skips it, so reservations are released
exactly once.
"""

from __future__ import annotations

from datetime import datetime
from functools import partial

import structlog

from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.exceptions import DomainException
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.model.order import OrderStatus, PaymentStatus
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

SYSTEM_ACTOR = "SYSTEM"
EXPIRY_NOTE = "Auto-cancelled: payment window expired"

logger = structlog.get_logger(__name__)


class ExpireUnpaidOrdersHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock = utc_now,
        attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._attempts = attempts

    def handle(self, now: datetime | None = None) -> int:
        """Expire every overdue unpaid order. Returns how many were expired."""
        now = now or self._clock()
        with self._uow_factory() as uow:
            order_ids = uow.orders.list_expired_ids(now)

        expired = 0
        for order_id in order_ids:
            try:
                done = run_in_transaction(
                    self._uow_factory,
                    partial(self._expire_one, order_id=order_id, now=now),
                    self._attempts,
                )
            except DomainException as exc:
                # The order stays pending and is picked up again next run.
                logger.error("order_expiry_failed", order_id=order_id, error=str(exc))
                continue
            if done:
                expired += 1

        logger.info("order_expiry_sweep", candidates=len(order_ids), expired=expired)
        return expired

    @staticmethod
    def _expire_one(uow: UnitOfWork, order_id: str, now: datetime) -> bool:
        order = uow.orders.get(order_id)
        if order is None or not order.is_expired(now):
            return False

        entry = order.cancel(SYSTEM_ACTOR, EXPIRY_NOTE, now, PaymentStatus.EXPIRED)
        moved = uow.orders.transition_status(
            order.id,
            from_status=OrderStatus.PENDING_PAYMENT,
            to_status=OrderStatus.CANCELLED,
            payment_status=PaymentStatus.EXPIRED,
        )
        if not moved:
            # Another sweep or a customer cancel got there first.
            return False

        uow.orders.add_history(order.id, entry)
        InventoryReservationService(uow).release_for_order(order)
        logger.info("order_expired", order_id=order.id, order_number=order.order_number)
        return True
