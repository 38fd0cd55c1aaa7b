"""SQLAlchemy implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.orm import Session

from grocer.domain.model.clock import as_utc
from grocer.domain.model.order import (
    Order,
    OrderHistory,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    ShippingSelection,
)
from grocer.domain.model.value_objects import Money, Quantity
from grocer.domain.repository.order_repository import OrderRepository
from grocer.infrastructure.persistence.orm import (
    OrderHistoryRow,
    OrderItemRow,
    OrderRow,
    PaymentRow,
)
from grocer.infrastructure.persistence.paging import paginate

_orders = OrderRow.__table__
_payments = PaymentRow.__table__


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        self._session.add(self._to_row(order))
        self._session.flush()

    def get(self, order_id: str) -> Order | None:
        row = self._session.execute(
            sa.select(OrderRow)
            .where(OrderRow.id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return self._to_domain(row) if row else None

    def order_number_exists(self, order_number: str) -> bool:
        found = self._session.execute(
            sa.select(OrderRow.id).where(OrderRow.order_number == order_number)
        ).first()
        return found is not None

    def list_for_user(
        self,
        user_id: str,
        page: int,
        limit: int,
        status: OrderStatus | None = None,
    ) -> tuple[list[Order], int]:
        stmt = sa.select(OrderRow).where(OrderRow.user_id == user_id)
        if status is not None:
            stmt = stmt.where(OrderRow.order_status == status.value)
        stmt = stmt.order_by(OrderRow.created_at.desc(), OrderRow.id)

        rows, total = paginate(self._session, stmt, page, limit)
        return [self._to_domain(r[0]) for r in rows], total

    def list_expired_ids(self, now: datetime) -> list[str]:
        return list(
            self._session.execute(
                sa.select(OrderRow.id)
                .where(
                    OrderRow.order_status == OrderStatus.PENDING_PAYMENT.value,
                    OrderRow.payment_status == PaymentStatus.UNPAID.value,
                    OrderRow.auto_cancel_at <= as_utc(now),
                )
                .order_by(OrderRow.auto_cancel_at)
            ).scalars()
        )

    def transition_status(
        self,
        order_id: str,
        from_status: OrderStatus,
        to_status: OrderStatus,
        payment_status: PaymentStatus,
    ) -> bool:
        result = self._session.execute(
            sa.update(_orders)
            .where(_orders.c.id == order_id, _orders.c.order_status == from_status.value)
            .values(order_status=to_status.value, payment_status=payment_status.value)
        )
        if result.rowcount != 1:
            return False
        self._session.execute(
            sa.update(_payments)
            .where(_payments.c.order_id == order_id)
            .values(status=payment_status.value)
        )
        return True

    def add_history(self, order_id: str, entry: OrderHistory) -> None:
        self._session.add(self._history_row(order_id, entry))
        self._session.flush()

    # --- Mapping --------------------------------------------------------------

    @classmethod
    def _to_row(cls, order: Order) -> OrderRow:
        row = OrderRow(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            address_id=order.address_id,
            store_id=order.store_id,
            shipping_courier=order.shipping.courier,
            shipping_service=order.shipping.service,
            shipping_description=order.shipping.description,
            shipping_estimate=order.shipping.estimate,
            shipping_fee=order.shipping.fee.minor_units,
            subtotal=order.subtotal.minor_units,
            tax=order.tax.minor_units,
            total_discount=order.total_discount.minor_units,
            total=order.total.minor_units,
            payment_method=order.payment_method.value,
            payment_status=order.payment_status.value,
            order_status=order.order_status.value,
            auto_cancel_at=as_utc(order.auto_cancel_at),
            created_at=as_utc(order.created_at),
        )
        row.items = [
            OrderItemRow(
                variant_id=item.variant_id,
                sku=item.sku,
                product_name=item.product_name,
                variant_name=item.variant_name,
                price=item.price.minor_units,
                quantity=item.quantity.value,
                subtotal=item.subtotal.minor_units,
                discount=item.discount.minor_units,
                total=item.total.minor_units,
            )
            for item in order.items
        ]
        row.history = [cls._history_row(order.id, h) for h in order.history]
        if order.payment is not None:
            row.payment = PaymentRow(
                method=order.payment.method.value,
                status=order.payment.status.value,
                amount=order.payment.amount.minor_units,
            )
        return row

    @staticmethod
    def _history_row(order_id: str, entry: OrderHistory) -> OrderHistoryRow:
        return OrderHistoryRow(
            order_id=order_id,
            from_status=entry.from_status.value if entry.from_status else None,
            to_status=entry.to_status.value,
            note=entry.note,
            created_by=entry.created_by,
            created_at=as_utc(entry.created_at),
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        def money(value: int) -> Money:
            return Money(Decimal(value))

        return Order(
            id=row.id,
            order_number=row.order_number,
            user_id=row.user_id,
            address_id=row.address_id,
            store_id=row.store_id,
            shipping=ShippingSelection(
                courier=row.shipping_courier,
                service=row.shipping_service,
                fee=money(row.shipping_fee),
                description=row.shipping_description,
                estimate=row.shipping_estimate,
            ),
            items=[
                OrderItem(
                    variant_id=i.variant_id,
                    sku=i.sku,
                    product_name=i.product_name,
                    variant_name=i.variant_name,
                    price=money(i.price),
                    quantity=Quantity(i.quantity),
                    discount=money(i.discount),
                )
                for i in row.items
            ],
            payment_method=PaymentMethod(row.payment_method),
            created_at=as_utc(row.created_at),
            auto_cancel_at=as_utc(row.auto_cancel_at),
            payment_status=PaymentStatus(row.payment_status),
            order_status=OrderStatus(row.order_status),
            tax=money(row.tax),
            total_discount=money(row.total_discount),
            payment=(
                Payment(
                    method=PaymentMethod(row.payment.method),
                    status=PaymentStatus(row.payment.status),
                    amount=money(row.payment.amount),
                )
                if row.payment is not None
                else None
            ),
            history=[
                OrderHistory(
                    from_status=OrderStatus(h.from_status) if h.from_status else None,
                    to_status=OrderStatus(h.to_status),
                    note=h.note,
                    created_by=h.created_by,
                    created_at=as_utc(h.created_at),
                )
                for h in row.history
            ],
        )
