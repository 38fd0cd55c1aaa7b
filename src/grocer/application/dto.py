"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI / HTTP layers and the application layer
without exposing domain internals. Amounts are integers in the smallest
currency unit and timestamps are ISO-8601 strings, ready for JSON.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

from grocer.domain.exceptions import ValidationError
from grocer.domain.model.inventory import InventoryRecord
from grocer.domain.model.order import Order
from grocer.domain.model.stock_journal import MonthlySummaryLine, StockJournalEntry

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------


def require_paging(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if limit < 1:
        raise ValidationError("Limit must be at least 1")


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @staticmethod
    def build(page: int, limit: int, total_items: int) -> Pagination:
        total_pages = math.ceil(total_items / limit) if total_items else 0
        return Pagination(
            page=page,
            limit=limit,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Stock journal
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockJournalDTO:
    id: int
    store_id: str
    store_name: str | None
    variant_id: str
    product_name: str | None
    variant_name: str | None
    sku: str | None
    type: str
    quantity: int
    stock_before: int
    stock_after: int
    reference_no: str
    reason: str
    notes: str | None
    created_by: str
    order_id: str | None
    created_at: str

    @staticmethod
    def from_entry(entry: StockJournalEntry) -> StockJournalDTO:
        return StockJournalDTO(
            id=entry.id,  # type: ignore[arg-type]
            store_id=entry.store_id,
            store_name=entry.store_name,
            variant_id=entry.variant_id,
            product_name=entry.product_name,
            variant_name=entry.variant_name,
            sku=entry.sku,
            type=entry.type.value,
            quantity=entry.quantity,
            stock_before=entry.stock_before,
            stock_after=entry.stock_after,
            reference_no=entry.reference_no,
            reason=entry.reason,
            notes=entry.notes,
            created_by=entry.created_by,
            order_id=entry.order_id,
            created_at=entry.created_at.isoformat(),
        )


@dataclass(frozen=True)
class MonthlySummaryDTO:
    variant_id: str
    product_name: str | None
    variant_name: str | None
    stock_start: int
    total_in: int
    total_out: int
    stock_end: int

    @staticmethod
    def from_line(line: MonthlySummaryLine) -> MonthlySummaryDTO:
        return MonthlySummaryDTO(
            variant_id=line.variant_id,
            product_name=line.product_name,
            variant_name=line.variant_name,
            stock_start=line.stock_start,
            total_in=line.total_in,
            total_out=line.total_out,
            stock_end=line.stock_end,
        )


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InventoryDTO:
    store_id: str
    store_name: str | None
    variant_id: str
    product_name: str | None
    variant_name: str | None
    sku: str | None
    quantity: int
    reserved: int
    available: int
    updated_at: str | None

    @staticmethod
    def from_record(record: InventoryRecord) -> InventoryDTO:
        return InventoryDTO(
            store_id=record.store_id,
            store_name=record.store_name,
            variant_id=record.variant_id,
            product_name=record.product_name,
            variant_name=record.variant_name,
            sku=record.sku,
            quantity=record.quantity,
            reserved=record.reserved,
            available=record.available,
            updated_at=record.updated_at.isoformat() if record.updated_at else None,
        )


@dataclass(frozen=True)
class AvailabilityDTO:
    available: bool
    reason: str
    inventory: InventoryDTO | None


@dataclass(frozen=True)
class VariantStockDTO:
    """A variant's stock in every store, plus totals across stores."""

    variant_id: str
    inventories: list[InventoryDTO]
    total_quantity: int
    total_reserved: int
    total_available: int
    store_count: int


# ---------------------------------------------------------------------------
# Orders and carts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreatedOrderDTO:
    order_id: str
    order_number: str


@dataclass(frozen=True)
class OrderItemDTO:
    variant_id: str
    sku: str
    product_name: str
    variant_name: str
    price: int
    quantity: int
    subtotal: int
    discount: int
    total: int


@dataclass(frozen=True)
class OrderHistoryDTO:
    from_status: str | None
    to_status: str
    note: str
    created_by: str
    created_at: str


@dataclass(frozen=True)
class OrderDTO:
    id: str
    order_number: str
    user_id: str
    store_id: str
    address_id: str
    order_status: str
    payment_status: str
    payment_method: str
    shipping_courier: str
    shipping_service: str
    shipping_fee: int
    subtotal: int
    total: int
    auto_cancel_at: str
    created_at: str
    items: list[OrderItemDTO]
    history: list[OrderHistoryDTO]

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            store_id=order.store_id,
            address_id=order.address_id,
            order_status=order.order_status.value,
            payment_status=order.payment_status.value,
            payment_method=order.payment_method.value,
            shipping_courier=order.shipping.courier,
            shipping_service=order.shipping.service,
            shipping_fee=order.shipping.fee.minor_units,
            subtotal=order.subtotal.minor_units,
            total=order.total.minor_units,
            auto_cancel_at=order.auto_cancel_at.isoformat(),
            created_at=order.created_at.isoformat(),
            items=[
                OrderItemDTO(
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
            ],
            history=[
                OrderHistoryDTO(
                    from_status=h.from_status.value if h.from_status else None,
                    to_status=h.to_status.value,
                    note=h.note,
                    created_by=h.created_by,
                    created_at=h.created_at.isoformat(),
                )
                for h in order.history
            ],
        )


@dataclass(frozen=True)
class CartItemDTO:
    variant_id: str
    quantity: int
    price_at_add: int
    line_total: int


@dataclass(frozen=True)
class CartDTO:
    id: str
    user_id: str
    store_id: str | None
    items: list[CartItemDTO]
    subtotal: int
