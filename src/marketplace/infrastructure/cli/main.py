import click

from marketplace.infrastructure.bootstrap import settings
from marketplace.infrastructure.cli.cart_commands import cart_add, cart_remove, cart_show, cart_update
from marketplace.infrastructure.cli.coupon_commands import coupon_check, coupon_create
from marketplace.infrastructure.cli.order_commands import (
    order_checkout,
    order_list,
    order_refund,
    order_show,
    order_verify,
)
from marketplace.infrastructure.cli.product_commands import product_list
from marketplace.infrastructure.logging_config import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override MARKETPLACE_LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """Marketplace: carts, checkout, payments and coupons"""
    configure_logging(log_level or settings().log_level)


@cli.group()
def order() -> None:
    """Check out and manage orders."""


@cli.group()
def cart() -> None:
    """Manage a buyer's cart."""


@cli.group()
def coupon() -> None:
    """Manage coupons."""


@cli.group()
def product() -> None:
    """Browse the catalog."""


# Register subcommands
order.add_command(order_checkout)
order.add_command(order_list)
order.add_command(order_refund)
order.add_command(order_show)
order.add_command(order_verify)
cart.add_command(cart_add)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
coupon.add_command(coupon_check)
coupon.add_command(coupon_create)
product.add_command(product_list)
