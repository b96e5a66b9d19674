"""Domain service: Order totals.

    tax   = max(0, subtotal - discount) * tax_rate
    total = subtotal - discount + tax

The discount is clamped to the subtotal before tax is applied, so the
total can never go negative.  Tax is rounded half-up to the cent.
"""

from __future__ import annotations

from decimal import Decimal

from marketplace.domain.exceptions import ValidationError
from marketplace.domain.model.order import OrderLineItem, OrderTotals
from marketplace.domain.model.value_objects import Money


class OrderTotalCalculator:

    def compute(
        self,
        items: list[OrderLineItem],
        discount: Money,
        tax_rate: Decimal,
    ) -> OrderTotals:
        if tax_rate < 0:
            raise ValidationError(f"Tax rate cannot be negative, got {tax_rate}")

        subtotal = Money.zero(discount.currency)
        for item in items:
            subtotal = subtotal + item.line_total

        discount = discount.min(subtotal)
        taxable = subtotal - discount
        tax = taxable.scale(tax_rate)

        return OrderTotals(
            subtotal=subtotal,
            discount_amount=discount,
            tax_amount=tax,
            total_amount=taxable + tax,
        )
