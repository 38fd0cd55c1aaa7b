"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from grocer.application.cancel_order import CancelOrderHandler
from grocer.application.create_order import CreateOrderHandler
from grocer.application.dto import OrderDTO
from grocer.application.expire_orders import ExpireUnpaidOrdersHandler
from grocer.application.list_orders import ListOrdersHandler
from grocer.application.place_direct_order import PlaceDirectOrderHandler
from grocer.application.show_order import ShowOrderHandler
from grocer.domain.exceptions import DomainException
from grocer.domain.model.actor import Actor, ActorRole
from grocer.domain.model.order import ShippingSelection
from grocer.infrastructure.bootstrap import settings, unit_of_work


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (id={dto.id})")
    click.echo(f"Status:   {dto.order_status} / payment {dto.payment_status} ({dto.payment_method})")
    click.echo(f"Store:    {dto.store_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Pay by:   {dto.auto_cancel_at}")
    click.echo()
    click.echo(f"  {'Product':<30} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*57}")
    for item in dto.items:
        label = f"{item.product_name} ({item.variant_name})"
        click.echo(f"  {label:<30} {item.quantity:>5} {item.price:>10} {item.total:>10}")
    click.echo(f"  {'-'*57}")
    click.echo(f"  {'Subtotal':<37} {dto.subtotal:>20}")
    click.echo(f"  {'Shipping ' + dto.shipping_courier + '/' + dto.shipping_service:<37} {dto.shipping_fee:>20}")
    click.echo(f"  {'Order Total':<37} {dto.total:>20}")
    if dto.history:
        click.echo()
        for h in dto.history:
            click.echo(f"  {h.created_at}  {h.from_status or '-'} -> {h.to_status}  {h.note}")


@click.command("create")
@click.option("--address", "address_id", required=True, help="Delivery address id.")
@click.option("--courier", required=True, help="Shipping courier, e.g. JNE.")
@click.option("--service", required=True, help="Courier service, e.g. REG.")
@click.option("--fee", required=True, type=int, help="Shipping fee.")
@click.option("--payment", "payment_method", default="MANUAL_TRANSFER", show_default=True)
@click.pass_obj
def order_create(
    actor: Actor, address_id: str, courier: str, service: str, fee: int, payment_method: str
) -> None:
    """Check out the acting user's cart."""
    current = settings()
    handler = CreateOrderHandler(
        uow_factory=unit_of_work,
        auto_cancel_after=current.auto_cancel_after,
        attempts=current.tx_retries,
    )
    try:
        shipping = ShippingSelection.create(courier, service, fee)
        dto = handler.handle(actor.user_id, address_id, shipping, payment_method)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} created (id={dto.order_id})")


@click.command("buy")
@click.option("--store", "store_id", required=True, help="Store id.")
@click.option("--variant", "variant_id", required=True, help="Product variant id.")
@click.option("--quantity", default=1, type=int, show_default=True)
@click.option("--address", "address_id", required=True, help="Delivery address id.")
@click.pass_obj
def order_buy(actor: Actor, store_id: str, variant_id: str, quantity: int, address_id: str) -> None:
    """Buy a single item directly, without the cart."""
    current = settings()
    handler = PlaceDirectOrderHandler(
        uow_factory=unit_of_work,
        shipping_fee=current.direct_shipping_fee,
        auto_cancel_after=current.auto_cancel_after,
        attempts=current.tx_retries,
    )
    try:
        dto = handler.handle(actor.user_id, variant_id, quantity, address_id, store_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} created (id={dto.order_id})")


@click.command("show")
@click.argument("order_id")
@click.pass_obj
def order_show(actor: Actor, order_id: str) -> None:
    """Display an order of the acting user."""
    handler = ShowOrderHandler(uow_factory=unit_of_work)
    try:
        dto = handler.handle(actor.user_id, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="PENDING_PAYMENT or CANCELLED.")
@click.option("--page", default=1, type=int, show_default=True)
@click.option("--limit", default=10, type=int, show_default=True)
@click.pass_obj
def order_list(actor: Actor, status: str | None, page: int, limit: int) -> None:
    """List the acting user's orders, newest first."""
    handler = ListOrdersHandler(uow_factory=unit_of_work)
    try:
        result = handler.handle(actor.user_id, status, page, limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No orders found.")
        return

    for dto in result.items:
        click.echo(f"{dto.order_number:<30} {dto.order_status:<16} {dto.payment_status:<10} {dto.total:>10}")


@click.command("cancel")
@click.argument("order_id")
@click.pass_obj
def order_cancel(actor: Actor, order_id: str) -> None:
    """Cancel an unpaid order and release its stock."""
    handler = CancelOrderHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        dto = handler.handle(actor.user_id, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} cancelled.")


@click.command("expire")
@click.pass_obj
def order_expire(actor: Actor) -> None:
    """Cancel unpaid orders past their payment window."""
    handler = ExpireUnpaidOrdersHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        actor.require_role(ActorRole.SUPER_ADMIN)
        count = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Expired {count} order(s).")
