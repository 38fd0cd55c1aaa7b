"""CLI commands for the acting user's cart."""

from __future__ import annotations

import click

from grocer.application.add_to_cart import AddToCartHandler
from grocer.domain.exceptions import DomainException
from grocer.domain.model.actor import Actor
from grocer.infrastructure.bootstrap import settings, unit_of_work


@click.command("add")
@click.option("--store", "store_id", required=True, help="Store id.")
@click.option("--variant", "variant_id", required=True, help="Product variant id.")
@click.option("--quantity", default=1, type=int, show_default=True)
@click.pass_obj
def cart_add(actor: Actor, store_id: str, variant_id: str, quantity: int) -> None:
    """Add units of a variant to the cart."""
    handler = AddToCartHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        dto = handler.handle(actor.user_id, store_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart {dto.id} @ {dto.store_id}")
    for item in dto.items:
        click.echo(f"  {item.variant_id:<20} x{item.quantity:<4} {item.line_total:>10}")
    click.echo(f"  {'Subtotal':<26} {dto.subtotal:>10}")
