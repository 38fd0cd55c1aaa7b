"""CLI commands for the stock journal."""

from __future__ import annotations

from datetime import datetime

import click

from grocer.application.dto import Page, StockJournalDTO
from grocer.application.record_stock_in import RecordStockInHandler
from grocer.application.record_stock_out import RecordStockOutHandler
from grocer.application.show_stock_history import ShowStockHistoryHandler
from grocer.application.stock_summary import MonthlySummaryHandler
from grocer.domain.exceptions import DomainException
from grocer.domain.model.actor import Actor
from grocer.infrastructure.bootstrap import settings, unit_of_work

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _movement_options(fn):
    fn = click.option("--notes", default=None, help="Optional free text.")(fn)
    fn = click.option("--reason", required=True, help="Why the stock changed (min. 5 characters).")(fn)
    fn = click.option("--ref", "reference_no", required=True, help="External reference number.")(fn)
    fn = click.option("--quantity", required=True, type=int, help="Units moved.")(fn)
    fn = click.option("--variant", "variant_id", required=True, help="Product variant id.")(fn)
    fn = click.option("--store", "store_id", required=True, help="Store id.")(fn)
    return fn


def _echo_entry(dto: StockJournalDTO) -> None:
    product = f"{dto.product_name} ({dto.variant_name})" if dto.product_name else dto.variant_id
    click.echo(f"Journal #{dto.id}  {dto.type} {dto.quantity}  {product} @ {dto.store_name or dto.store_id}")
    click.echo(f"  Stock:     {dto.stock_before} -> {dto.stock_after}")
    click.echo(f"  Reference: {dto.reference_no}")
    click.echo(f"  Reason:    {dto.reason}")
    if dto.notes:
        click.echo(f"  Notes:     {dto.notes}")
    click.echo(f"  By:        {dto.created_by} at {dto.created_at}")


@click.command("in")
@_movement_options
@click.pass_obj
def stock_in(
    actor: Actor,
    store_id: str,
    variant_id: str,
    quantity: int,
    reference_no: str,
    reason: str,
    notes: str | None,
) -> None:
    """Record incoming stock (restock, return)."""
    handler = RecordStockInHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        dto = handler.handle(actor, store_id, variant_id, quantity, reference_no, reason, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_entry(dto)


@click.command("out")
@_movement_options
@click.pass_obj
def stock_out(
    actor: Actor,
    store_id: str,
    variant_id: str,
    quantity: int,
    reference_no: str,
    reason: str,
    notes: str | None,
) -> None:
    """Record outgoing stock (damage, loss, correction)."""
    handler = RecordStockOutHandler(uow_factory=unit_of_work, attempts=settings().tx_retries)
    try:
        dto = handler.handle(actor, store_id, variant_id, quantity, reference_no, reason, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_entry(dto)


@click.command("history")
@click.option("--store", "store_id", required=True, help="Store id.")
@click.option("--variant", "variant_id", default=None, help="Limit to one variant.")
@click.option("--type", "type_", type=click.Choice(["IN", "OUT"], case_sensitive=False), default=None)
@click.option("--from", "start", type=DATE, default=None, help="First day (YYYY-MM-DD).")
@click.option("--to", "end", type=DATE, default=None, help="Last day, inclusive.")
@click.option("--page", default=1, type=int, show_default=True)
@click.option("--limit", default=10, type=int, show_default=True)
@click.pass_obj
def stock_history(
    actor: Actor,
    store_id: str,
    variant_id: str | None,
    type_: str | None,
    start: datetime | None,
    end: datetime | None,
    page: int,
    limit: int,
) -> None:
    """Show the stock journal, newest first."""
    handler = ShowStockHistoryHandler(uow_factory=unit_of_work)
    try:
        if variant_id:
            result: Page[StockJournalDTO] = handler.for_variant(
                actor, store_id, variant_id, page, limit, type_
            )
        else:
            result = handler.for_store(
                actor,
                store_id,
                page,
                limit,
                type_,
                start.date() if start else None,
                end.date() if end else None,
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No stock movements found.")
        return

    click.echo(f"{'ID':>5} {'Type':<4} {'Qty':>6} {'Before':>7} {'After':>7}  {'SKU':<14} {'Reference':<14} Created")
    click.echo("-" * 90)
    for e in result.items:
        click.echo(
            f"{e.id:>5} {e.type:<4} {e.quantity:>6} {e.stock_before:>7} {e.stock_after:>7}  "
            f"{(e.sku or e.variant_id):<14} {e.reference_no:<14} {e.created_at}"
        )
    p = result.pagination
    click.echo(f"Page {p.page}/{max(p.total_pages, 1)}  ({p.total_items} entries)")


@click.command("show")
@click.argument("entry_id", type=int)
@click.pass_obj
def stock_show(actor: Actor, entry_id: int) -> None:
    """Show one journal entry."""
    handler = ShowStockHistoryHandler(uow_factory=unit_of_work)
    try:
        dto = handler.by_id(actor, entry_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_entry(dto)


@click.command("summary")
@click.option("--store", "store_id", required=True, help="Store id.")
@click.option("--from", "start", type=DATE, required=True, help="First day (YYYY-MM-DD).")
@click.option("--to", "end", type=DATE, required=True, help="Last day, inclusive.")
@click.option("--page", default=1, type=int, show_default=True)
@click.option("--limit", default=50, type=int, show_default=True)
@click.pass_obj
def stock_summary(
    actor: Actor, store_id: str, start: datetime, end: datetime, page: int, limit: int
) -> None:
    """Per-variant stock summary for a date range."""
    handler = MonthlySummaryHandler(uow_factory=unit_of_work)
    try:
        report = handler.handle(actor, store_id, start.date(), end.date(), page, limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{report.store_name}: {report.start_date} .. {report.end_date}")
    if not report.lines:
        click.echo("No stock movements in this period.")
        return

    click.echo(f"{'Product':<32} {'Start':>7} {'In':>7} {'Out':>7} {'End':>7}")
    click.echo("-" * 64)
    for line in report.lines:
        label = f"{line.product_name} ({line.variant_name})"
        click.echo(
            f"{label:<32} {line.stock_start:>7} {line.total_in:>7} {line.total_out:>7} {line.stock_end:>7}"
        )
