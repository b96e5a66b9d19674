"""CLI commands for the Coupon aggregate."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import click

from marketplace.application.check_coupon import CheckCouponHandler
from marketplace.application.create_coupon import CreateCouponHandler
from marketplace.domain.exceptions import DomainException
from marketplace.infrastructure.bootstrap import (
    coupon_repository,
    settings,
    unit_of_work_factory,
)


@click.command("create")
@click.option("--code", required=True, help="Coupon code (at least 4 characters).")
@click.option("--type", "kind", type=click.Choice(["percentage", "fixed"]), required=True)
@click.option("--value", required=True, help="Percent off, or fixed amount off.")
@click.option("--days", default=30, show_default=True, type=int, help="Days until expiry.")
@click.option("--min-order", default="0", show_default=True, help="Minimum order subtotal.")
@click.option("--max-uses", default=1, show_default=True, type=int)
@click.option("--for-user", "user_id", default=None, help="Restrict to one buyer.")
def coupon_create(
    code: str,
    kind: str,
    value: str,
    days: int,
    min_order: str,
    max_uses: int,
    user_id: str | None,
) -> None:
    """Create a marketing coupon."""
    handler = CreateCouponHandler(
        uow_factory=unit_of_work_factory(),
        currency=settings().currency,
    )
    expires_at = datetime.now(timezone.utc) + timedelta(days=days)

    try:
        dto = asyncio.run(
            handler.handle(code, kind, value, expires_at, min_order, max_uses, user_id)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {dto.code} created: {dto.kind} {dto.value}, expires {dto.expires_at}")


@click.command("check")
@click.option("--code", required=True, help="Coupon code.")
@click.option("--subtotal", required=True, help="Order subtotal to check against.")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
def coupon_check(code: str, subtotal: str, user_id: str) -> None:
    """Preview a coupon's discount without using it."""
    handler = CheckCouponHandler(coupon_repo=coupon_repository(), currency=settings().currency)

    try:
        dto = handler.handle(code, subtotal, user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if dto.valid:
        click.echo(f"{dto.code}: {dto.discount} off")
    else:
        click.echo(f"{dto.code}: {dto.message}")
