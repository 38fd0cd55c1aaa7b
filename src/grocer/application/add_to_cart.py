"""Application service: Add To Cart use case.

A cart only ever holds items of one store. Stock is validated against
the merged quantity (what is already in the cart plus the new units)
but nothing is reserved until checkout.
"""

from __future__ import annotations

from grocer.application.dto import CartDTO, CartItemDTO
from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.exceptions import InsufficientStockError, NotFoundError, ValidationError
from grocer.domain.model.catalog import Cart, CartItem
from grocer.domain.model.inventory import require_positive_quantity
from grocer.domain.model.value_objects import Money
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)


class AddToCartHandler:

    def __init__(
        self, uow_factory: UnitOfWorkFactory, attempts: int = DEFAULT_ATTEMPTS
    ) -> None:
        self._uow_factory = uow_factory
        self._attempts = attempts

    def handle(
        self, user_id: str, store_id: str, variant_id: str, quantity: int = 1
    ) -> CartDTO:
        require_positive_quantity(quantity)

        def work(uow: UnitOfWork) -> CartDTO:
            store = uow.catalog.get_store(store_id)
            if store is None or not store.is_active:
                raise NotFoundError(f"Store '{store_id}' not found")
            variant = uow.catalog.get_variant(variant_id)
            if variant is None:
                raise NotFoundError(f"Product variant '{variant_id}' not found")
            if not variant.is_active:
                raise ValidationError("Product variant is not available")

            cart = uow.carts.get_for_user(user_id)
            if cart is None:
                cart = uow.carts.create(user_id, store_id)
            elif cart.store_id != store_id:
                if not cart.is_empty:
                    raise ValidationError(
                        "Cart already contains items from another store. "
                        "Clear the cart before shopping at a different store."
                    )
                uow.carts.set_store(cart.id, store_id)

            existing = cart.find_item(variant_id)
            merged = quantity + (existing.quantity if existing else 0)

            result = InventoryReservationService(uow).check_stock_availability(
                store_id, variant_id, merged
            )
            if not result.available:
                raise InsufficientStockError(
                    available=result.inventory.available if result.inventory else 0,
                    requested=merged,
                    message=result.reason,
                )

            uow.carts.save_item(
                cart.id,
                CartItem(
                    variant_id=variant_id,
                    quantity=merged,
                    price_at_add=existing.price_at_add if existing else variant.price,
                ),
            )
            return _to_dto(uow.carts.get_for_user(user_id))  # type: ignore[arg-type]

        return run_in_transaction(self._uow_factory, work, self._attempts)


def _to_dto(cart: Cart) -> CartDTO:
    subtotal = Money.sum_of(item.line_total for item in cart.items)
    return CartDTO(
        id=cart.id,
        user_id=cart.user_id,
        store_id=cart.store_id,
        items=[
            CartItemDTO(
                variant_id=item.variant_id,
                quantity=item.quantity,
                price_at_add=item.price_at_add.minor_units,
                line_total=item.line_total.minor_units,
            )
            for item in cart.items
        ],
        subtotal=subtotal.minor_units,
    )
