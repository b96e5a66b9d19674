"""Unit tests for the Order aggregate and its business rules."""

import pytest

from marketplace.domain.exceptions import ValidationError
from marketplace.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    OrderTotals,
    PaymentMethod,
    PaymentStatus,
)
from marketplace.domain.model.value_objects import BillingAddress, Money, Quantity

ADDRESS = BillingAddress("Ada", "Obi", "ada@example.com", "0800")


def _make_item(qty: int = 2, price: str = "1000") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id="P1",
        product_name="Antivirus Pro",
        vendor_id="vendor-1",
        vendor_name="Ada Software Ltd",
        variant_id="V1",
        variant_name="Basic Plan",
        variant_duration="Lifetime",
        quantity=Quantity(qty),
        price_at_purchase=Money.of(price),
    )


def _totals(subtotal="2000", discount="0", tax="100", total="2100") -> OrderTotals:
    return OrderTotals(Money.of(subtotal), Money.of(discount), Money.of(tax), Money.of(total))


def _order(**overrides) -> Order:
    kwargs = dict(
        buyer_id="buyer-1",
        items=[_make_item()],
        billing_address=ADDRESS,
        totals=_totals(),
        payment_method=PaymentMethod.PAYSTACK,
    )
    kwargs.update(overrides)
    return Order.create(**kwargs)


class TestOrderLineItem:

    def test_line_total(self):
        assert _make_item(qty=3, price="250").line_total == Money.of("750")

    def test_line_item_is_immutable(self):
        item = _make_item()
        with pytest.raises(AttributeError):
            item.price_at_purchase = Money.of("1")


class TestOrderCreation:

    def test_happy_path(self):
        order = _order()
        assert order.buyer_id == "buyer-1"
        assert order.payment_status == PaymentStatus.PENDING
        assert order.order_status == OrderStatus.PENDING
        assert order.total_amount == Money.of("2100")
        assert order.transaction_reference is None

    def test_ids_are_unique(self):
        assert _order().id != _order().id

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            _order(items=[])

    def test_missing_buyer_rejected(self):
        with pytest.raises(ValidationError, match="belong to a buyer"):
            _order(buyer_id="")

    def test_subtotal_must_match_line_items(self):
        with pytest.raises(ValidationError, match="does not match line items"):
            _order(totals=_totals(subtotal="1999", total="2099"))

    def test_discount_cannot_exceed_subtotal(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            _order(totals=_totals(discount="2500", tax="0", total="0"))

    def test_total_must_match_components(self):
        with pytest.raises(ValidationError, match="does not match"):
            _order(totals=_totals(total="2000"))


class TestPaymentMethod:

    def test_parse_is_case_insensitive(self):
        assert PaymentMethod.parse("paystack") == PaymentMethod.PAYSTACK

    def test_parse_unknown(self):
        with pytest.raises(ValidationError, match="Unsupported payment method"):
            PaymentMethod.parse("Cash")


class TestOrderTransitions:

    def test_mark_paid(self):
        order = _order()
        order.mark_paid()
        assert order.payment_status == PaymentStatus.COMPLETED
        assert order.order_status == OrderStatus.COMPLETED

    def test_mark_payment_failed_cancels(self):
        order = _order()
        order.mark_payment_failed()
        assert order.payment_status == PaymentStatus.FAILED
        assert order.order_status == OrderStatus.CANCELLED

    def test_cannot_pay_twice(self):
        order = _order()
        order.mark_paid()
        with pytest.raises(ValidationError, match="already completed"):
            order.mark_paid()

    def test_refund_completed_order(self):
        order = _order()
        order.mark_paid()
        order.refund()
        assert order.payment_status == PaymentStatus.REFUNDED
        assert order.order_status == OrderStatus.REFUNDED

    def test_refund_pending_order_rejected(self):
        with pytest.raises(ValidationError, match="Cannot refund"):
            _order().refund()

    def test_attach_payment_reference(self):
        order = _order()
        order.attach_payment_reference("ref-1")
        assert order.transaction_reference == "ref-1"
