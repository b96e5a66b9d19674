"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Amounts are
pre-formatted strings, e.g. "NGN 2,100.00".
"""

from __future__ import annotations

from dataclasses import dataclass

from marketplace.domain.model.cart import Cart
from marketplace.domain.model.coupon import Coupon
from marketplace.domain.model.order import Order


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_name: str
    variant_name: str
    vendor_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    buyer_id: str
    payment_status: str
    order_status: str
    payment_method: str
    items: list[OrderLineItemDTO]
    subtotal: str
    discount: str
    tax: str
    total: str
    coupon_code: str | None
    transaction_reference: str | None
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,
            buyer_id=order.buyer_id,
            payment_status=order.payment_status.value,
            order_status=order.order_status.value,
            payment_method=order.payment_method.value,
            items=[
                OrderLineItemDTO(
                    product_name=item.product_name,
                    variant_name=item.variant_name,
                    vendor_name=item.vendor_name,
                    quantity=item.quantity.value,
                    unit_price=str(item.price_at_purchase),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            subtotal=str(order.subtotal),
            discount=str(order.discount_amount),
            tax=str(order.tax_amount),
            total=str(order.total_amount),
            coupon_code=order.applied_coupon_code,
            transaction_reference=order.transaction_reference,
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class PaymentSessionDTO:
    reference: str
    redirect_url: str


@dataclass(frozen=True)
class CheckoutResultDTO:
    """Output of a checkout: the pending order, where to pay, the new coupon."""

    order: OrderDTO
    payment: PaymentSessionDTO
    new_coupon_code: str


@dataclass(frozen=True)
class CouponDTO:
    code: str
    kind: str
    value: str
    expires_at: str
    min_order_amount: str
    uses: str
    restricted_to_user_id: str | None
    is_active: bool

    @staticmethod
    def from_coupon(coupon: Coupon) -> CouponDTO:
        return CouponDTO(
            code=coupon.code,
            kind=coupon.kind.value,
            value=str(coupon.value),
            expires_at=coupon.expires_at.strftime("%Y-%m-%d %H:%M UTC"),
            min_order_amount=str(coupon.min_order_amount),
            uses=f"{coupon.uses_count}/{coupon.max_uses}",
            restricted_to_user_id=coupon.restricted_to_user_id,
            is_active=coupon.is_active,
        )


@dataclass(frozen=True)
class CouponCheckDTO:
    code: str
    valid: bool
    discount: str | None
    message: str


@dataclass(frozen=True)
class CartItemDTO:
    product_id: str
    variant_id: str
    quantity: int


@dataclass(frozen=True)
class CartDTO:
    user_id: str
    items: list[CartItemDTO]

    @staticmethod
    def from_cart(cart: Cart) -> CartDTO:
        return CartDTO(
            user_id=cart.user_id,
            items=[
                CartItemDTO(item.product_id, item.variant_id, item.quantity)
                for item in cart.items
            ],
        )
