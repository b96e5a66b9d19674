"""CLI commands for the product catalog."""

from __future__ import annotations

import click

from marketplace.infrastructure.bootstrap import product_repository


@click.command("list")
def product_list() -> None:
    """List all products and their variants."""
    products = product_repository().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'Product':<14} {'Variant':<14} {'Name':<28} {'Duration':<10} {'Price':>16}")
    click.echo("-" * 86)
    for p in products:
        for v in p.variants:
            click.echo(
                f"{p.id:<14} {v.id:<14} {(p.name + ' / ' + v.name)[:28]:<28} "
                f"{v.duration.value:<10} {str(v.selling_price):>16}"
            )
