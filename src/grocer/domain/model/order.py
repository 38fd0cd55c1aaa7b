"""Order aggregate: the result of a checkout.

The Order is an aggregate root that owns its item snapshots, its payment
record and its status history. Orders are born in PENDING_PAYMENT with an
``auto_cancel_at`` deadline; an unpaid order past that deadline is expired
by the sweep, which releases the stock the order had reserved.
"""

from __future__ import annotations

import secrets
import string
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from grocer.domain.exceptions import ValidationError
from grocer.domain.model.catalog import ProductVariant
from grocer.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    UNPAID = "UNPAID"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class PaymentMethod(Enum):
    MANUAL_TRANSFER = "MANUAL_TRANSFER"
    PAYMENT_GATEWAY = "PAYMENT_GATEWAY"

    @staticmethod
    def parse(raw: str | None) -> PaymentMethod:
        if not raw:
            raise ValidationError("Payment method is required")
        try:
            return PaymentMethod(raw.strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown payment method '{raw}'") from None


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
DEFAULT_AUTO_CANCEL_AFTER = timedelta(hours=1)
MAX_LINE_ITEMS = 50
ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_SUFFIX_LENGTH = 8


def generate_order_number(now: datetime) -> str:
    """Human-readable order number: ``ORD-<timestamp>-<random suffix>``.

    Not unique by construction; the order table carries a unique
    constraint and the caller regenerates on collision.
    """
    suffix = "".join(
        secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(ORDER_NUMBER_SUFFIX_LENGTH)
    )
    return f"ORD-{now:%Y%m%d%H%M%S}-{suffix}"


@dataclass(frozen=True)
class ShippingSelection:
    courier: str
    service: str
    fee: Money
    description: str = ""
    estimate: str = ""

    @staticmethod
    def create(
        courier: str | None,
        service: str | None,
        fee: int | str | None,
        description: str | None = None,
        estimate: str | None = None,
    ) -> ShippingSelection:
        if not courier or not service or fee in (None, ""):
            raise ValidationError("Shipping method is required")
        return ShippingSelection(
            courier=courier.strip(),
            service=service.strip(),
            fee=Money.of(fee),
            description=(description or "").strip(),
            estimate=(estimate or "").strip(),
        )


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a purchased line at order-creation time.

    Decoupled from the live catalog: later renames or price changes of the
    variant do not alter historical orders.
    """

    variant_id: str
    sku: str
    product_name: str
    variant_name: str
    price: Money  # locked at order-creation time
    quantity: Quantity
    discount: Money = field(default_factory=Money.zero)

    @property
    def subtotal(self) -> Money:
        return self.price * self.quantity.value

    @property
    def total(self) -> Money:
        return self.subtotal - self.discount

    @staticmethod
    def snapshot(variant: ProductVariant, quantity: int, price: Money | None = None) -> OrderItem:
        return OrderItem(
            variant_id=variant.id,
            sku=variant.sku,
            product_name=variant.product_name,
            variant_name=variant.name,
            price=price if price is not None else variant.price,
            quantity=Quantity(quantity),
        )


@dataclass(frozen=True)
class OrderHistory:
    """One status transition. ``from_status`` is None for the creation entry."""

    from_status: OrderStatus | None
    to_status: OrderStatus
    note: str
    created_by: str
    created_at: datetime


@dataclass
class Payment:
    method: PaymentMethod
    status: PaymentStatus
    amount: Money


@dataclass
class Order:
    """Aggregate root for checkouts.

    Use the ``Order.create()`` factory for new orders; it enforces the
    business rules and records the initial history entry. The
    ``__init__`` stays simple so repositories can reconstitute persisted
    orders without re-validating.
    """

    id: str
    order_number: str
    user_id: str
    address_id: str
    store_id: str
    shipping: ShippingSelection
    items: list[OrderItem]
    payment_method: PaymentMethod
    created_at: datetime
    auto_cancel_at: datetime
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    order_status: OrderStatus = OrderStatus.PENDING_PAYMENT
    tax: Money = field(default_factory=Money.zero)
    total_discount: Money = field(default_factory=Money.zero)
    payment: Payment | None = None
    history: list[OrderHistory] = field(default_factory=list)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        address_id: str,
        store_id: str,
        shipping: ShippingSelection,
        items: list[OrderItem],
        payment_method: PaymentMethod,
        order_number: str,
        now: datetime,
        auto_cancel_after: timedelta = DEFAULT_AUTO_CANCEL_AFTER,
    ) -> Order:
        """Create a new unpaid order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        order = Order(
            id=uuid.uuid4().hex,
            order_number=order_number,
            user_id=user_id,
            address_id=address_id,
            store_id=store_id,
            shipping=shipping,
            items=list(items),
            payment_method=payment_method,
            created_at=now,
            auto_cancel_at=now + auto_cancel_after,
        )
        order.payment = Payment(
            method=payment_method,
            status=PaymentStatus.UNPAID,
            amount=order.total,
        )
        order.history.append(
            OrderHistory(
                from_status=None,
                to_status=OrderStatus.PENDING_PAYMENT,
                note="Order created",
                created_by=user_id,
                created_at=now,
            )
        )
        return order

    # --- State transitions ----------------------------------------------------

    def cancel(
        self,
        actor_id: str,
        note: str,
        now: datetime,
        payment_status: PaymentStatus = PaymentStatus.CANCELLED,
    ) -> OrderHistory:
        """Transition PENDING_PAYMENT -> CANCELLED.

        Releasing the reserved stock is the caller's job and must happen in
        the same unit of work.
        """
        if self.order_status != OrderStatus.PENDING_PAYMENT:
            raise ValidationError(
                f"Cannot cancel order {self.order_number}: current status is "
                f"{self.order_status.value}, expected PENDING_PAYMENT"
            )
        entry = OrderHistory(
            from_status=self.order_status,
            to_status=OrderStatus.CANCELLED,
            note=note,
            created_by=actor_id,
            created_at=now,
        )
        self.order_status = OrderStatus.CANCELLED
        self.payment_status = payment_status
        if self.payment is not None:
            self.payment.status = payment_status
        self.history.append(entry)
        return entry

    def is_expired(self, now: datetime) -> bool:
        return (
            self.order_status == OrderStatus.PENDING_PAYMENT
            and self.payment_status == PaymentStatus.UNPAID
            and self.auto_cancel_at <= now
        )

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        return Money.sum_of(item.subtotal for item in self.items)

    @property
    def total(self) -> Money:
        return self.subtotal + self.shipping.fee + self.tax - self.total_discount
