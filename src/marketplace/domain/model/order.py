"""Order aggregate: the core of the domain.

The Order is an aggregate root that owns its line items.
All business invariants are enforced here.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from marketplace.domain.exceptions import ValidationError
from marketplace.domain.model.product import ProductSnapshot
from marketplace.domain.model.value_objects import BillingAddress, Money, Quantity


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    PAYSTACK = "Paystack"
    PAYPAL = "Paypal"
    FLUTTERWAVE = "Flutterwave"

    @staticmethod
    def parse(raw: str) -> PaymentMethod:
        for method in PaymentMethod:
            if method.value.lower() == raw.strip().lower():
                return method
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Unsupported payment method '{raw}' (expected one of {allowed})")


@dataclass(frozen=True)
class OrderLineItem:
    """Snapshot of product, vendor, variant and price at purchase time.

    Frozen: later edits to the product never reach historical orders.
    """

    product_id: str
    product_name: str
    vendor_id: str
    vendor_name: str
    variant_id: str
    variant_name: str
    variant_duration: str | None
    quantity: Quantity
    price_at_purchase: Money

    @property
    def line_total(self) -> Money:
        return self.price_at_purchase * self.quantity.value

    @staticmethod
    def from_snapshot(snapshot: ProductSnapshot, quantity: Quantity) -> OrderLineItem:
        variant = snapshot.variant
        return OrderLineItem(
            product_id=snapshot.product_id,
            product_name=snapshot.name,
            vendor_id=snapshot.vendor_id,
            vendor_name=snapshot.vendor_display_name,
            variant_id=variant.id,
            variant_name=variant.name,
            variant_duration=variant.duration.value if variant.duration else None,
            quantity=quantity,
            price_at_purchase=variant.selling_price,
        )


@dataclass(frozen=True)
class OrderTotals:
    """Result of pricing an order: all four amounts in one currency."""

    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    total_amount: Money


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """Aggregate root for buyer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str
    buyer_id: str
    items: list[OrderLineItem]
    billing_address: BillingAddress
    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    total_amount: Money
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PENDING
    order_status: OrderStatus = OrderStatus.PENDING
    applied_coupon_code: str | None = None
    transaction_reference: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        buyer_id: str,
        items: list[OrderLineItem],
        billing_address: BillingAddress,
        totals: OrderTotals,
        payment_method: PaymentMethod,
        applied_coupon_code: str | None = None,
    ) -> Order:
        """Create a new pending order, enforcing all invariants."""
        if not buyer_id:
            raise ValidationError("Order must belong to a buyer")
        if not items:
            raise ValidationError("Order must contain at least one item")

        line_sum = Money.zero(totals.subtotal.currency)
        for item in items:
            line_sum = line_sum + item.line_total
        if line_sum != totals.subtotal:
            raise ValidationError(
                f"Subtotal {totals.subtotal} does not match line items ({line_sum})"
            )
        if totals.discount_amount > totals.subtotal:
            raise ValidationError("Discount cannot exceed the subtotal")
        expected_total = totals.subtotal - totals.discount_amount + totals.tax_amount
        if totals.total_amount != expected_total:
            raise ValidationError(
                f"Total {totals.total_amount} does not match {expected_total}"
            )

        return Order(
            id=uuid.uuid4().hex,
            buyer_id=buyer_id,
            items=list(items),
            billing_address=billing_address,
            subtotal=totals.subtotal,
            discount_amount=totals.discount_amount,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            payment_method=payment_method,
            applied_coupon_code=applied_coupon_code,
        )

    # --- State transitions ----------------------------------------------------

    def attach_payment_reference(self, reference: str) -> None:
        if not reference:
            raise ValidationError("Payment reference is required")
        self.transaction_reference = reference
        self._touch()

    def mark_paid(self) -> None:
        """Gateway confirmed the payment: pending -> completed."""
        self._assert_payment_pending()
        self.payment_status = PaymentStatus.COMPLETED
        self.order_status = OrderStatus.COMPLETED
        self._touch()

    def mark_payment_failed(self) -> None:
        """Gateway reported a failed payment; the order will not be fulfilled."""
        self._assert_payment_pending()
        self.payment_status = PaymentStatus.FAILED
        self.order_status = OrderStatus.CANCELLED
        self._touch()

    def refund(self) -> None:
        if self.payment_status != PaymentStatus.COMPLETED:
            raise ValidationError(
                f"Cannot refund order with payment status {self.payment_status.value}"
            )
        self.payment_status = PaymentStatus.REFUNDED
        self.order_status = OrderStatus.REFUNDED
        self._touch()

    # --- Computed properties --------------------------------------------------

    @property
    def is_payment_pending(self) -> bool:
        return self.payment_status == PaymentStatus.PENDING

    @property
    def product_names(self) -> list[str]:
        return [item.product_name for item in self.items]

    # --- Internal helpers -----------------------------------------------------

    def _assert_payment_pending(self) -> None:
        if self.payment_status != PaymentStatus.PENDING:
            raise ValidationError(
                f"Payment for order {self.id} is already {self.payment_status.value}"
            )

    def _touch(self) -> None:
        self.updated_at = _now()
