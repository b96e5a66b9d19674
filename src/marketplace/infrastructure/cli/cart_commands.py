"""CLI commands for the Cart aggregate."""

from __future__ import annotations

import click

from marketplace.application.dto import CartDTO
from marketplace.application.manage_cart import (
    AddToCartHandler,
    RemoveFromCartHandler,
    ShowCartHandler,
    UpdateCartItemHandler,
)
from marketplace.domain.exceptions import DomainException
from marketplace.infrastructure.bootstrap import cart_repository


def _display_cart(dto: CartDTO) -> None:
    if not dto.items:
        click.echo(f"Cart of {dto.user_id} is empty.")
        return
    click.echo(f"Cart of {dto.user_id}")
    click.echo(f"  {'Product':<20} {'Variant':<20} {'Qty':>5}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(f"  {item.product_id:<20} {item.variant_id:<20} {item.quantity:>5}")


@click.command("add")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@click.option("--qty", "quantity", default=1, show_default=True, type=int, help="Quantity.")
def cart_add(user_id: str, product_id: str, variant_id: str, quantity: int) -> None:
    """Add an item to a cart (quantities of the same variant are merged)."""
    handler = AddToCartHandler(cart_repo=cart_repository())
    try:
        dto = handler.handle(user_id, product_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_cart(dto)


@click.command("update")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@click.option("--qty", "quantity", required=True, type=int, help="New quantity.")
def cart_update(user_id: str, product_id: str, variant_id: str, quantity: int) -> None:
    """Change the quantity of a cart item."""
    handler = UpdateCartItemHandler(cart_repo=cart_repository())
    try:
        dto = handler.handle(user_id, product_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_cart(dto)


@click.command("remove")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
def cart_remove(user_id: str, product_id: str, variant_id: str) -> None:
    """Remove an item from a cart."""
    handler = RemoveFromCartHandler(cart_repo=cart_repository())
    try:
        dto = handler.handle(user_id, product_id, variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_cart(dto)


@click.command("show")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
def cart_show(user_id: str) -> None:
    """Show a buyer's cart."""
    _display_cart(ShowCartHandler(cart_repo=cart_repository()).handle(user_id))
