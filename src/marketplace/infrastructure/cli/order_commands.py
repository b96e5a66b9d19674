"""CLI commands for the Order aggregate."""

from __future__ import annotations

import asyncio
from decimal import Decimal, InvalidOperation

import click

from marketplace.application.checkout import CheckoutHandler
from marketplace.application.dto import CheckoutResultDTO, OrderDTO
from marketplace.application.list_orders import ListOrdersHandler
from marketplace.application.manage_cart import ClearCartHandler
from marketplace.application.refund_order import RefundOrderHandler
from marketplace.application.show_order import ShowOrderHandler
from marketplace.application.verify_payment import VerifyPaymentHandler
from marketplace.domain.exceptions import DomainException
from marketplace.domain.model.cart import CartItem
from marketplace.domain.model.order import PaymentMethod
from marketplace.domain.model.value_objects import BillingAddress
from marketplace.infrastructure.bootstrap import (
    cart_repository,
    checkout_handler,
    order_repository,
    payment_gateway,
    unit_of_work_factory,
)


def _parse_items(raw: str) -> list[CartItem]:
    """Parse 'p1:v1:2,p2:v9:1' into CartItem list."""
    items: list[CartItem] = []
    for triple in raw.split(","):
        triple = triple.strip()
        parts = triple.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid item format '{triple}'. Expected 'ProductId:VariantId:Quantity'."
            )
        product_id, variant_id, qty_str = (p.strip() for p in parts)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        items.append(CartItem(product_id, variant_id, qty))
    return items


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (order={dto.order_status}, payment={dto.payment_status})")
    click.echo(f"Buyer:    {dto.buyer_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Method:   {dto.payment_method}")
    if dto.transaction_reference:
        click.echo(f"Ref:      {dto.transaction_reference}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>16} {'Total':>16}")
    click.echo(f"  {'-'*64}")
    for item in dto.items:
        name = f"{item.product_name} ({item.variant_name})"
        click.echo(
            f"  {name[:24]:<24} {item.quantity:>5} {item.unit_price:>16} {item.line_total:>16}"
        )
    click.echo(f"  {'-'*64}")
    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>34}")
    discount_label = f"Discount ({dto.coupon_code})" if dto.coupon_code else "Discount"
    click.echo(f"  {discount_label:<30} {dto.discount:>34}")
    click.echo(f"  {'Tax':<30} {dto.tax:>34}")
    click.echo(f"  {'Order Total':<30} {dto.total:>34}")


async def _checkout(handler: CheckoutHandler, **kwargs) -> CheckoutResultDTO:
    try:
        return await handler.handle(**kwargs)
    finally:
        await handler.wait_for_notifications()


@click.command("checkout")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
@click.option("--items", default=None, help="Items as 'ProductId:VariantId:Qty,...'. Defaults to the buyer's cart.")
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--email", required=True)
@click.option("--phone", required=True)
@click.option("--payment-method", default="Paystack", show_default=True)
@click.option("--coupon", "coupon_code", default=None, help="Coupon code to apply.")
def order_checkout(
    user_id: str,
    items: str | None,
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    payment_method: str,
    coupon_code: str | None,
) -> None:
    """Check out a cart: create a pending order and a payment session."""
    from_cart = items is None
    if from_cart:
        cart = cart_repository().get_for_user(user_id)
        if cart is None or cart.is_empty:
            raise click.ClickException("Cart is empty")
        cart_items = list(cart.items)
    else:
        cart_items = _parse_items(items)

    try:
        billing_address = BillingAddress(first_name, last_name, email, phone)
        method = PaymentMethod.parse(payment_method)
        result = asyncio.run(
            _checkout(
                checkout_handler(),
                buyer_id=user_id,
                cart_items=cart_items,
                billing_address=billing_address,
                payment_method=method,
                coupon_code=coupon_code,
            )
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if from_cart:
        ClearCartHandler(cart_repo=cart_repository()).handle(user_id)

    _display_order(result.order)
    click.echo()
    click.echo(f"Pay at:     {result.payment.redirect_url}")
    click.echo(f"Reference:  {result.payment.reference}")
    click.echo(f"New coupon: {result.new_coupon_code}")


@click.command("list")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
def order_list(user_id: str) -> None:
    """List a buyer's orders, newest first."""
    orders = ListOrdersHandler(order_repo=order_repository()).handle(user_id)
    if not orders:
        click.echo("No orders found.")
        return
    click.echo(f"{'Order':<34} {'Created':<22} {'Order':<11} {'Payment':<10} {'Total':>16}")
    click.echo("-" * 97)
    for dto in orders:
        click.echo(
            f"{dto.id:<34} {dto.created_at:<22} {dto.order_status:<11} "
            f"{dto.payment_status:<10} {dto.total:>16}"
        )


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.option("--user", "user_id", required=True, help="Buyer ID.")
def order_show(order_id: str, user_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id, user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("verify")
@click.option("--reference", required=True, help="Gateway transaction reference.")
def order_verify(reference: str) -> None:
    """Verify a payment with the gateway and update its order."""
    handler = VerifyPaymentHandler(
        uow_factory=unit_of_work_factory(),
        payment_gateway=payment_gateway(),
    )

    try:
        dto = asyncio.run(handler.handle(reference))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id}: order={dto.order_status}, payment={dto.payment_status}")


@click.command("refund")
@click.option("--id", "order_id", required=True, help="Order ID to refund.")
@click.option("--amount", default=None, help="Partial refund amount. Defaults to the full total.")
def order_refund(order_id: str, amount: str | None) -> None:
    """Refund a paid order through the gateway."""
    try:
        refund_amount = Decimal(amount) if amount is not None else None
    except InvalidOperation:
        raise click.BadParameter(f"Invalid amount '{amount}'.")

    handler = RefundOrderHandler(
        uow_factory=unit_of_work_factory(),
        payment_gateway=payment_gateway(),
    )

    try:
        dto = asyncio.run(handler.handle(order_id, refund_amount))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id} refunded.")
