"""Application service: List Orders use case (query)."""

from __future__ import annotations

from grocer.application.dto import OrderDTO, Page, Pagination, require_paging
from grocer.domain.exceptions import ValidationError
from grocer.domain.model.order import OrderStatus
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory


class ListOrdersHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        user_id: str,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[OrderDTO]:
        require_paging(page, limit)
        order_status = None
        if status:
            try:
                order_status = OrderStatus(status.strip().upper())
            except ValueError:
                raise ValidationError(f"Unknown order status '{status}'") from None

        with self._uow_factory() as uow:
            orders, total = uow.orders.list_for_user(user_id, page, limit, order_status)

        return Page(
            items=[OrderDTO.from_order(o) for o in orders],
            pagination=Pagination.build(page, limit, total),
        )
