"""Application service: Show Order use case (query)."""

from __future__ import annotations

from grocer.application.dto import OrderDTO
from grocer.domain.exceptions import NotFoundError
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory


class ShowOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: str, order_id: str) -> OrderDTO:
        with self._uow_factory() as uow:
            order = uow.orders.get(order_id)

        # Someone else's order is reported exactly like a missing one.
        if order is None or order.user_id != user_id:
            raise NotFoundError("Order not found")
        return OrderDTO.from_order(order)
