"""SQLAlchemy implementation of CartRepository."""

from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.orm import Session

from grocer.domain.exceptions import NotFoundError
from grocer.domain.model.catalog import Cart, CartItem
from grocer.domain.model.value_objects import Money
from grocer.domain.repository.cart_repository import CartRepository
from grocer.infrastructure.persistence.orm import CartItemRow, CartRow


class SqlCartRepository(CartRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_for_user(self, user_id: str) -> Cart | None:
        row = self._session.execute(
            sa.select(CartRow).where(CartRow.user_id == user_id)
        ).scalar_one_or_none()
        return self._to_domain(row) if row else None

    def create(self, user_id: str, store_id: str) -> Cart:
        row = CartRow(id=uuid.uuid4().hex, user_id=user_id, store_id=store_id, items=[])
        self._session.add(row)
        self._session.flush()
        return self._to_domain(row)

    def set_store(self, cart_id: str, store_id: str) -> None:
        self._load(cart_id).store_id = store_id
        self._session.flush()

    def save_item(self, cart_id: str, item: CartItem) -> None:
        row = self._load(cart_id)
        for existing in row.items:
            if existing.variant_id == item.variant_id:
                existing.quantity = item.quantity
                existing.price_at_add = item.price_at_add.minor_units
                break
        else:
            row.items.append(
                CartItemRow(
                    variant_id=item.variant_id,
                    quantity=item.quantity,
                    price_at_add=item.price_at_add.minor_units,
                )
            )
        self._session.flush()

    def remove_items(self, cart_id: str, items: list[CartItem]) -> int:
        removed = 0
        for item in items:
            result = self._session.execute(
                sa.delete(CartItemRow)
                .where(
                    CartItemRow.cart_id == cart_id,
                    CartItemRow.variant_id == item.variant_id,
                    CartItemRow.quantity == item.quantity,
                )
                .execution_options(synchronize_session=False)
            )
            removed += result.rowcount

        # The loaded collection still holds the deleted rows.
        row = self._session.get(CartRow, cart_id)
        if row is not None:
            self._session.expire(row, ["items"])
        return removed

    # --- Internal helpers -----------------------------------------------------

    def _load(self, cart_id: str) -> CartRow:
        row = self._session.get(CartRow, cart_id)
        if row is None:
            raise NotFoundError("Cart not found")
        return row

    @staticmethod
    def _to_domain(row: CartRow) -> Cart:
        return Cart(
            id=row.id,
            user_id=row.user_id,
            store_id=row.store_id,
            items=[
                CartItem(
                    variant_id=i.variant_id,
                    quantity=i.quantity,
                    price_at_add=Money(Decimal(i.price_at_add)),
                )
                for i in row.items
            ],
        )
