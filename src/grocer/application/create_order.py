"""Application service: Create Order (checkout) use case.

Turns the user's cart into an unpaid order while reserving the stock it
consumes. Runs in two steps:

1. Pre-checks in a read-only unit of work: payment method and shipping
   present, cart non-empty, address owned by the user, every variant
   active, every line currently available at the cart's store. Any
   failure here rejects the checkout before a single write.
2. One transaction that inserts the order (items, payment, history),
   reserves each line through the reservation primitive and removes the
   checked cart lines, failing if they changed in between. A reservation
   lost to a concurrent checkout raises InsufficientStockError and rolls
   the whole transaction back.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import structlog

from grocer.application.dto import CreatedOrderDTO
from grocer.application.transaction import DEFAULT_ATTEMPTS, run_in_transaction
from grocer.domain.exceptions import ConflictError, InsufficientStockError, ValidationError
from grocer.domain.model.catalog import Cart, ProductVariant
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.model.order import (
    DEFAULT_AUTO_CANCEL_AFTER,
    Order,
    OrderItem,
    PaymentMethod,
    ShippingSelection,
    generate_order_number,
)
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

ORDER_NUMBER_ATTEMPTS = 5

logger = structlog.get_logger(__name__)


def assign_order_number(uow: UnitOfWork, now: datetime) -> str:
    """Generate an order number not yet taken.

    The unique column is the final guard; this only avoids a predictable
    collision turning into a failed checkout.
    """
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        number = generate_order_number(now)
        if not uow.orders.order_number_exists(number):
            return number
    raise ConflictError("Could not generate a unique order number")


def require_user_address(uow: UnitOfWork, user_id: str, address_id: str | None) -> None:
    if not address_id:
        raise ValidationError("Address is required")
    address = uow.catalog.get_address(address_id)
    if address is None or address.user_id != user_id:
        raise ValidationError("Address not found")


def require_sellable(
    uow: UnitOfWork, store_id: str, variant_id: str, quantity: int
) -> ProductVariant:
    """Return the active variant if the store can supply ``quantity`` of it."""
    variant = uow.catalog.get_variant(variant_id)
    if variant is None or not variant.is_active:
        raise ValidationError(f"Product variant '{variant_id}' is not available")

    result = InventoryReservationService(uow).check_stock_availability(
        store_id, variant_id, quantity
    )
    if not result.available:
        raise InsufficientStockError(
            available=result.inventory.available if result.inventory else 0,
            requested=quantity,
            message=f"{variant.product_name} ({variant.name}): {result.reason}",
        )
    return variant


def take_cart_lines(uow: UnitOfWork, cart: Cart) -> None:
    """Remove exactly the lines that were priced and checked.

    A concurrent checkout of the same cart, or a line changed after the
    pre-checks, makes the counts differ and aborts the order. Lines added
    in the meantime stay in the cart.
    """
    removed = uow.carts.remove_items(cart.id, cart.items)
    if removed == len(cart.items):
        return
    if removed == 0:
        raise ValidationError("Cart is empty")
    raise ValidationError("Cart changed during checkout, please try again")


class CreateOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock = utc_now,
        auto_cancel_after: timedelta = DEFAULT_AUTO_CANCEL_AFTER,
        attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._auto_cancel_after = auto_cancel_after
        self._attempts = attempts

    def handle(
        self,
        user_id: str,
        address_id: str | None,
        shipping: ShippingSelection | None,
        payment_method: str | PaymentMethod | None,
    ) -> CreatedOrderDTO:
        if shipping is None:
            raise ValidationError("Shipping method is required")
        method = (
            payment_method
            if isinstance(payment_method, PaymentMethod)
            else PaymentMethod.parse(payment_method)
        )

        # --- Phase 1: validate, no writes -------------------------------------
        with self._uow_factory() as uow:
            cart = uow.carts.get_for_user(user_id)
            if cart is None or cart.is_empty or cart.store_id is None:
                raise ValidationError("Cart is empty")
            require_user_address(uow, user_id, address_id)
            items = self._snapshot_items(uow, cart)

        # --- Phase 2: one transaction -----------------------------------------
        def work(uow: UnitOfWork) -> Order:
            now = self._clock()
            order = Order.create(
                user_id=user_id,
                address_id=address_id,  # type: ignore[arg-type]
                store_id=cart.store_id,  # type: ignore[arg-type]
                shipping=shipping,
                items=items,
                payment_method=method,
                order_number=assign_order_number(uow, now),
                now=now,
                auto_cancel_after=self._auto_cancel_after,
            )
            take_cart_lines(uow, cart)
            uow.orders.add(order)
            InventoryReservationService(uow).reserve_for_order(order)
            return order

        order = run_in_transaction(self._uow_factory, work, self._attempts)
        logger.info(
            "order_created",
            order_id=order.id,
            order_number=order.order_number,
            user_id=user_id,
            store_id=order.store_id,
            lines=len(order.items),
            total=order.total.minor_units,
        )
        return CreatedOrderDTO(order_id=order.id, order_number=order.order_number)

    @staticmethod
    def _snapshot_items(uow: UnitOfWork, cart: Cart) -> list[OrderItem]:
        items: list[OrderItem] = []
        for line in cart.items:
            variant = require_sellable(uow, cart.store_id, line.variant_id, line.quantity)  # type: ignore[arg-type]
            # Subtotal uses the price the customer saw when adding to cart.
            items.append(OrderItem.snapshot(variant, line.quantity, price=line.price_at_add))
        return items
