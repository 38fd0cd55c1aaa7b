"""CLI commands for database setup."""

from __future__ import annotations

import json

import click

from grocer.application.seed_catalog import SeedCatalogHandler
from grocer.domain.exceptions import DomainException
from grocer.infrastructure.bootstrap import init_db, unit_of_work


@click.command("init")
def db_init() -> None:
    """Create all tables."""
    init_db()
    click.echo("Database initialized.")


@click.command("seed")
@click.option("--file", "path", required=True, type=click.Path(exists=True, dir_okay=False),
              help="JSON document with stores, variants, addresses and stock.")
def db_seed(path: str) -> None:
    """Load catalog data and opening stock from a JSON file."""
    try:
        with open(path, encoding="utf-8") as fh:
            document = json.load(fh)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON in {path}: {exc}")

    init_db()
    handler = SeedCatalogHandler(uow_factory=unit_of_work)
    try:
        result = handler.handle(document)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Seeded stores={result.stores} variants={result.variants} "
        f"addresses={result.addresses} stock_entries={result.stock_entries}"
    )
