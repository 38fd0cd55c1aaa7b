"""HTTP routes.

Endpoints are plain ``def`` functions: FastAPI runs them in its threadpool,
which suits the synchronous SQLAlchemy sessions underneath. Each endpoint
builds its handler from the unit-of-work factory on ``app.state`` and wraps
the returned DTO in the ``{"success": true, "data": ...}`` envelope.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from grocer.application.add_to_cart import AddToCartHandler
from grocer.application.cancel_order import CancelOrderHandler
from grocer.application.check_stock import CheckStockHandler
from grocer.application.create_order import CreateOrderHandler
from grocer.application.expire_orders import ExpireUnpaidOrdersHandler
from grocer.application.initialize_inventory import InitializeInventoryHandler
from grocer.application.list_orders import ListOrdersHandler
from grocer.application.place_direct_order import PlaceDirectOrderHandler
from grocer.application.record_stock_in import RecordStockInHandler
from grocer.application.record_stock_out import RecordStockOutHandler
from grocer.application.release_stock import ReleaseStockHandler
from grocer.application.reserve_stock import ReserveStockHandler
from grocer.application.show_inventory import ShowInventoryHandler
from grocer.application.show_order import ShowOrderHandler
from grocer.application.show_stock_history import ShowStockHistoryHandler
from grocer.application.stock_summary import MonthlySummaryHandler
from grocer.domain.model.actor import Actor
from grocer.domain.model.clock import Clock
from grocer.domain.model.order import ShippingSelection
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory
from grocer.infrastructure.api.deps import (
    Paging,
    current_actor,
    get_clock,
    get_settings,
    get_uow_factory,
    stock_manager,
    super_admin,
)
from grocer.infrastructure.api.schemas import (
    CartItemRequest,
    CreateOrderRequest,
    DirectOrderRequest,
    ReservationRequest,
    StockMovementRequest,
    ok,
)
from grocer.infrastructure.config import Settings

stock_journal_router = APIRouter(prefix="/stock-journal", tags=["stock-journal"])
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


# ---------------------------------------------------------------------------
# Stock journal
# ---------------------------------------------------------------------------


@stock_journal_router.post("/in", status_code=status.HTTP_201_CREATED)
def record_stock_in(
    body: StockMovementRequest,
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> dict:
    handler = RecordStockInHandler(uow_factory=uow_factory, clock=clock, attempts=settings.tx_retries)
    dto = handler.handle(
        actor,
        body.store_id,
        body.product_variant_id,
        body.quantity,
        body.reference_no,
        body.reason,
        body.notes,
    )
    return ok(dto, "Stock IN created successfully")


@stock_journal_router.post("/out", status_code=status.HTTP_201_CREATED)
def record_stock_out(
    body: StockMovementRequest,
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> dict:
    handler = RecordStockOutHandler(uow_factory=uow_factory, clock=clock, attempts=settings.tx_retries)
    dto = handler.handle(
        actor,
        body.store_id,
        body.product_variant_id,
        body.quantity,
        body.reference_no,
        body.reason,
        body.notes,
    )
    return ok(dto, "Stock OUT created successfully")


@stock_journal_router.get("/variant/{store_id}/{variant_id}")
def variant_history(
    store_id: str,
    variant_id: str,
    type: str | None = Query(None),
    paging: Paging = Depends(),
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    result = ShowStockHistoryHandler(uow_factory).for_variant(
        actor, store_id, variant_id, paging.page, paging.limit, type
    )
    return ok(result.items, pagination=result.pagination)


@stock_journal_router.get("/store/{store_id}")
def store_history(
    store_id: str,
    type: str | None = Query(None),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    paging: Paging = Depends(),
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    result = ShowStockHistoryHandler(uow_factory).for_store(
        actor, store_id, paging.page, paging.limit, type, start_date, end_date
    )
    return ok(result.items, pagination=result.pagination)


@stock_journal_router.get("/report/monthly-summary")
def monthly_summary(
    store_id: str = Query(..., alias="storeId"),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    paging: Paging = Depends(),
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    report = MonthlySummaryHandler(uow_factory).handle(
        actor, store_id, start_date, end_date, paging.page, paging.limit
    )
    return ok(report)


@stock_journal_router.get("/{entry_id}")
def journal_entry(
    entry_id: int,
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    return ok(ShowStockHistoryHandler(uow_factory).by_id(actor, entry_id))


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


def _quantity_or_one(raw: str | None) -> int:
    """Missing, zero or unparsable quantities check a single unit."""
    try:
        return int(raw or 0) or 1
    except ValueError:
        return 1


@inventory_router.get("/check/{store_id}/{variant_id}")
def check_stock(
    store_id: str,
    variant_id: str,
    quantity: str | None = Query(None),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    requested = _quantity_or_one(quantity)
    return ok(CheckStockHandler(uow_factory).handle(store_id, variant_id, requested))


@inventory_router.post("/reserve")
def reserve_stock(
    body: ReservationRequest,
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
) -> dict:
    handler = ReserveStockHandler(uow_factory=uow_factory, attempts=settings.tx_retries)
    dto = handler.handle(actor, body.store_id, body.variant_id, body.quantity)
    return ok(dto, "Stock reserved")


@inventory_router.post("/release")
def release_stock(
    body: ReservationRequest,
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
) -> dict:
    handler = ReleaseStockHandler(uow_factory=uow_factory, attempts=settings.tx_retries)
    dto = handler.handle(actor, body.store_id, body.variant_id, body.quantity)
    return ok(dto, "Reserved stock released")


@inventory_router.get("/store/{store_id}")
def store_inventory(
    store_id: str,
    search: str | None = Query(None),
    paging: Paging = Depends(),
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    result = ShowInventoryHandler(uow_factory).for_store(
        actor, store_id, paging.page, paging.limit, search
    )
    return ok(result.items, pagination=result.pagination)


@inventory_router.get("/variant/{variant_id}")
def variant_inventory(
    variant_id: str,
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    return ok(ShowInventoryHandler(uow_factory).for_variant(actor, variant_id))


@inventory_router.get("/detail/{store_id}/{variant_id}")
def inventory_detail(
    store_id: str,
    variant_id: str,
    actor: Actor = Depends(stock_manager),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    return ok(ShowInventoryHandler(uow_factory).detail(actor, store_id, variant_id))


@inventory_router.post("/initialize/{variant_id}")
def initialize_inventory(
    variant_id: str,
    actor: Actor = Depends(super_admin),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
) -> dict:
    handler = InitializeInventoryHandler(uow_factory=uow_factory, attempts=settings.tx_retries)
    count = handler.handle(actor, variant_id)
    return ok(
        {"variant_id": variant_id, "store_count": count},
        f"Inventory initialized for {count} store(s)",
    )


# ---------------------------------------------------------------------------
# Cart and checkout
# ---------------------------------------------------------------------------


@cart_router.post("/items")
def add_cart_item(
    body: CartItemRequest,
    actor: Actor = Depends(current_actor),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
) -> dict:
    handler = AddToCartHandler(uow_factory=uow_factory, attempts=settings.tx_retries)
    dto = handler.handle(actor.user_id, body.store_id, body.product_variant_id, body.quantity)
    return ok(dto, "Item added to cart")


@checkout_router.post("/create-order")
def create_order(
    body: CreateOrderRequest,
    actor: Actor = Depends(current_actor),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> dict:
    shipping = ShippingSelection.create(
        body.shipping_courier,
        body.shipping_service,
        body.shipping_fee,
        body.shipping_description,
        body.shipping_estimate,
    )
    handler = CreateOrderHandler(
        uow_factory=uow_factory,
        clock=clock,
        auto_cancel_after=settings.auto_cancel_after,
        attempts=settings.tx_retries,
    )
    dto = handler.handle(actor.user_id, body.address_id, shipping, body.payment_method)
    return ok(dto, "Order created")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@order_router.post("", status_code=status.HTTP_201_CREATED)
def place_direct_order(
    body: DirectOrderRequest,
    actor: Actor = Depends(current_actor),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> dict:
    handler = PlaceDirectOrderHandler(
        uow_factory=uow_factory,
        clock=clock,
        shipping_fee=settings.direct_shipping_fee,
        auto_cancel_after=settings.auto_cancel_after,
        attempts=settings.tx_retries,
    )
    dto = handler.handle(
        actor.user_id, body.product_variant_id, body.quantity, body.address_id, body.store_id
    )
    return ok(dto, "Order created")


@order_router.get("")
def list_orders(
    order_status: str | None = Query(None, alias="status"),
    paging: Paging = Depends(),
    actor: Actor = Depends(current_actor),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    result = ListOrdersHandler(uow_factory).handle(
        actor.user_id, order_status, paging.page, paging.limit
    )
    return ok(result.items, pagination=result.pagination)


# Registered before "/{order_id}" routes so "expire" is not read as an id.
@order_router.post("/expire")
def expire_orders(
    actor: Actor = Depends(super_admin),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> dict:
    handler = ExpireUnpaidOrdersHandler(uow_factory=uow_factory, clock=clock, attempts=settings.tx_retries)
    count = handler.handle()
    return ok({"expired": count}, f"Expired {count} order(s)")


@order_router.get("/{order_id}")
def show_order(
    order_id: str,
    actor: Actor = Depends(current_actor),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> dict:
    return ok(ShowOrderHandler(uow_factory).handle(actor.user_id, order_id))


@order_router.post("/{order_id}/cancel")
def cancel_order(
    order_id: str,
    actor: Actor = Depends(current_actor),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> dict:
    handler = CancelOrderHandler(uow_factory=uow_factory, clock=clock, attempts=settings.tx_retries)
    return ok(handler.handle(actor.user_id, order_id), "Order cancelled")
