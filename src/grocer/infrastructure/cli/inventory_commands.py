"""CLI commands for inventory queries and reservations."""

from __future__ import annotations

import click

from grocer.application.check_stock import CheckStockHandler
from grocer.application.dto import InventoryDTO
from grocer.application.initialize_inventory import InitializeInventoryHandler
from grocer.application.release_stock import ReleaseStockHandler
from grocer.application.reserve_stock import ReserveStockHandler
from grocer.application.show_inventory import ShowInventoryHandler
from grocer.domain.exceptions import DomainException
from grocer.domain.model.actor import Actor
from grocer.infrastructure.bootstrap import settings, unit_of_work


def _line_options(fn):
    fn = click.option("--quantity", required=True, type=int, help="Units.")(fn)
    fn = click.option("--variant", "variant_id", required=True, help="Product variant id.")(fn)
    fn = click.option("--store", "store_id", required=True, help="Store id.")(fn)
    return fn


def _echo_table(rows: list[InventoryDTO]) -> None:
    click.echo(f"{'Store':<14} {'Product':<30} {'Total':>8} {'Reserved':>10} {'Available':>10}")
    click.echo("-" * 76)
    for r in rows:
        label = f"{r.product_name} ({r.variant_name})"
        click.echo(
            f"{(r.store_name or r.store_id):<14} {label:<30} {r.quantity:>8} {r.reserved:>10} {r.available:>10}"
        )


@click.command("check")
@_line_options
def inventory_check(store_id: str, variant_id: str, quantity: int) -> None:
    """Check whether a store can supply a quantity."""
    handler = CheckStockHandler(uow_factory=unit_of_work)
    try:
        result = handler.handle(store_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    status = "AVAILABLE" if result.available else "NOT AVAILABLE"
    click.echo(f"{status}: {result.reason}")


@click.command("reserve")
@_line_options
@click.pass_obj
def inventory_reserve(actor: Actor, store_id: str, variant_id: str, quantity: int) -> None:
    """Earmark stock for a pending order."""
    handler = ReserveStockHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        dto = handler.handle(actor, store_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reserved {quantity}. Now reserved={dto.reserved} available={dto.available}")


@click.command("release")
@_line_options
@click.pass_obj
def inventory_release(actor: Actor, store_id: str, variant_id: str, quantity: int) -> None:
    """Release previously reserved stock."""
    handler = ReleaseStockHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        dto = handler.handle(actor, store_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Released {quantity}. Now reserved={dto.reserved} available={dto.available}")


@click.command("init")
@click.argument("variant_id")
@click.pass_obj
def inventory_init(actor: Actor, variant_id: str) -> None:
    """Create zero-stock rows for a variant in every active store."""
    handler = InitializeInventoryHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        count = handler.handle(actor, variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Inventory initialized for variant '{variant_id}' in {count} store(s)")


@click.command("show")
@click.option("--store", "store_id", default=None, help="List one store's inventory.")
@click.option("--variant", "variant_id", default=None, help="Show one variant across stores.")
@click.option("--search", default=None, help="Filter by product, variant or SKU.")
@click.option("--page", default=1, type=int, show_default=True)
@click.option("--limit", default=20, type=int, show_default=True)
@click.pass_obj
def inventory_show(
    actor: Actor,
    store_id: str | None,
    variant_id: str | None,
    search: str | None,
    page: int,
    limit: int,
) -> None:
    """Show current inventory levels."""
    if bool(store_id) == bool(variant_id):
        raise click.UsageError("Pass exactly one of --store or --variant")

    handler = ShowInventoryHandler(uow_factory=unit_of_work)
    try:
        if store_id:
            result = handler.for_store(actor, store_id, page, limit, search)
            rows = result.items
        else:
            summary = handler.for_variant(actor, variant_id)  # type: ignore[arg-type]
            rows = summary.inventories
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not rows:
        click.echo("No inventory records found.")
        return

    _echo_table(rows)
    if variant_id:
        click.echo(
            f"Total: quantity={summary.total_quantity} reserved={summary.total_reserved} "
            f"available={summary.total_available} stores={summary.store_count}"
        )


@click.command("detail")
@click.option("--store", "store_id", required=True, help="Store id.")
@click.option("--variant", "variant_id", required=True, help="Product variant id.")
@click.pass_obj
def inventory_detail(actor: Actor, store_id: str, variant_id: str) -> None:
    """Show one inventory record."""
    handler = ShowInventoryHandler(uow_factory=unit_of_work)
    try:
        dto = handler.detail(actor, store_id, variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_table([dto])
