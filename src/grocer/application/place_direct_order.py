"""Application service: Place Direct Order use case.

Single-item purchase without a cart ("buy now"). Shipping is fixed to
the default courier service and payment to manual transfer; otherwise it
has the same guarantees as checkout: stock is checked against
``available``, reserved in the order's transaction, and a Payment row is
created with the order.
"""

from __future__ import annotations

from datetime import timedelta

import structlog

from grocer.application.create_order import (
    assign_order_number,
    require_sellable,
    require_user_address,
)
from grocer.application.dto import CreatedOrderDTO
from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.exceptions import NotFoundError
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.model.inventory import require_positive_quantity
from grocer.domain.model.order import (
    DEFAULT_AUTO_CANCEL_AFTER,
    Order,
    OrderItem,
    PaymentMethod,
    ShippingSelection,
)
from grocer.domain.model.value_objects import Money
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

DIRECT_COURIER = "JNE"
DIRECT_SERVICE = "REG"
DEFAULT_DIRECT_SHIPPING_FEE = 10000

logger = structlog.get_logger(__name__)


class PlaceDirectOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock = utc_now,
        shipping_fee: int = DEFAULT_DIRECT_SHIPPING_FEE,
        auto_cancel_after: timedelta = DEFAULT_AUTO_CANCEL_AFTER,
        attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._shipping = ShippingSelection(
            courier=DIRECT_COURIER,
            service=DIRECT_SERVICE,
            fee=Money.of(shipping_fee),
            description="Regular delivery",
        )
        self._auto_cancel_after = auto_cancel_after
        self._attempts = attempts

    def handle(
        self,
        user_id: str,
        variant_id: str,
        quantity: int,
        address_id: str | None,
        store_id: str,
    ) -> CreatedOrderDTO:
        require_positive_quantity(quantity)

        with self._uow_factory() as uow:
            store = uow.catalog.get_store(store_id)
            if store is None or not store.is_active:
                raise NotFoundError(f"Store '{store_id}' not found")
            require_user_address(uow, user_id, address_id)
            variant = require_sellable(uow, store_id, variant_id, quantity)

        item = OrderItem.snapshot(variant, quantity)

        def work(uow: UnitOfWork) -> Order:
            now = self._clock()
            order = Order.create(
                user_id=user_id,
                address_id=address_id,  # type: ignore[arg-type]
                store_id=store_id,
                shipping=self._shipping,
                items=[item],
                payment_method=PaymentMethod.MANUAL_TRANSFER,
                order_number=assign_order_number(uow, now),
                now=now,
                auto_cancel_after=self._auto_cancel_after,
            )
            uow.orders.add(order)
            InventoryReservationService(uow).reserve_for_order(order)
            return order

        order = run_in_transaction(self._uow_factory, work, self._attempts)
        logger.info(
            "direct_order_created",
            order_id=order.id,
            order_number=order.order_number,
            user_id=user_id,
            store_id=store_id,
            variant_id=variant_id,
            quantity=quantity,
        )
        return CreatedOrderDTO(order_id=order.id, order_number=order.order_number)
