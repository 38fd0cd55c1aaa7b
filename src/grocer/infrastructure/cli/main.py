import click

from grocer.domain.exceptions import DomainException
from grocer.domain.model.actor import Actor, ActorRole
from grocer.infrastructure.bootstrap import settings
from grocer.infrastructure.cli.cart_commands import cart_add
from grocer.infrastructure.cli.db_commands import db_init, db_seed
from grocer.infrastructure.cli.inventory_commands import (
    inventory_check,
    inventory_detail,
    inventory_init,
    inventory_release,
    inventory_reserve,
    inventory_show,
)
from grocer.infrastructure.cli.order_commands import (
    order_buy,
    order_cancel,
    order_create,
    order_expire,
    order_list,
    order_show,
)
from grocer.infrastructure.cli.stock_commands import (
    stock_history,
    stock_in,
    stock_out,
    stock_show,
    stock_summary,
)
from grocer.infrastructure.logging import configure_logging


@click.group()
@click.option("--user", "user_id", default="cli-admin", envvar="GROCER_USER",
              show_default=True, help="Acting user id.")
@click.option("--role", default=ActorRole.SUPER_ADMIN.value, envvar="GROCER_ROLE",
              type=click.Choice([r.value for r in ActorRole]), show_default=True,
              help="Role of the acting user.")
@click.option("--store", "store_id", default=None, envvar="GROCER_STORE",
              help="Store a STORE_ADMIN is assigned to.")
@click.pass_context
def cli(ctx: click.Context, user_id: str, role: str, store_id: str | None) -> None:
    """Grocer: multi-store inventory, stock ledger and checkout."""
    configure_logging(settings())
    try:
        ctx.obj = Actor(user_id=user_id, role=ActorRole(role), store_id=store_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def stock() -> None:
    """Record and inspect stock movements."""


@cli.group()
def inventory() -> None:
    """Query and reserve inventory."""


@cli.group()
def cart() -> None:
    """Manage the acting user's cart."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
def serve(host: str, port: int) -> None:
    """Run the HTTP API."""
    import uvicorn

    from grocer.infrastructure.api.app import create_app

    uvicorn.run(create_app(), host=host, port=port)


# Register subcommands
db.add_command(db_init)
db.add_command(db_seed)
stock.add_command(stock_in)
stock.add_command(stock_out)
stock.add_command(stock_history)
stock.add_command(stock_show)
stock.add_command(stock_summary)
inventory.add_command(inventory_check)
inventory.add_command(inventory_reserve)
inventory.add_command(inventory_release)
inventory.add_command(inventory_init)
inventory.add_command(inventory_show)
inventory.add_command(inventory_detail)
cart.add_command(cart_add)
order.add_command(order_create)
order.add_command(order_buy)
order.add_command(order_show)
order.add_command(order_list)
order.add_command(order_cancel)
order.add_command(order_expire)
