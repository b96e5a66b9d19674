"""Domain service: Pricing.

Turns a buyer's cart items into priced, immutable order line items.
Pure over catalog reads: nothing is written.

Validation is two-phase, like every cross-aggregate check in this
package: all quantities and identifiers are validated before the first
catalog lookup, so a malformed cart never costs a database round trip.
"""

from __future__ import annotations

from dataclasses import dataclass

from marketplace.domain.exceptions import EntityNotFoundError, ValidationError
from marketplace.domain.model.cart import CartItem
from marketplace.domain.model.order import OrderLineItem
from marketplace.domain.model.value_objects import Money, Quantity
from marketplace.domain.repository.product_repository import ProductRepository
from marketplace.domain.repository.user_directory import UserDirectory


@dataclass(frozen=True)
class PricedCart:
    items: list[OrderLineItem]
    subtotal: Money


class PricingService:

    def __init__(
        self,
        product_repo: ProductRepository,
        user_directory: UserDirectory,
        currency: str,
    ) -> None:
        self._product_repo = product_repo
        self._user_directory = user_directory
        self._currency = currency

    def price(self, cart_items: list[CartItem]) -> PricedCart:
        """Resolve every cart item to a line item and sum the subtotal.

        Raises:
            ValidationError: empty cart, missing ids or quantity < 1.
            EntityNotFoundError: unknown product, variant or vendor.
        """
        if not cart_items:
            raise ValidationError("Cart is empty")

        # Phase 1: validate shape, no lookups
        quantities: list[Quantity] = []
        for item in cart_items:
            if not item.product_id or not item.variant_id:
                raise ValidationError(
                    "Each cart item must have productId, variantId, and quantity."
                )
            if not isinstance(item.quantity, int) or item.quantity <= 0:
                raise ValidationError(
                    f"Quantity for product {item.product_id} must be at least 1."
                )
            quantities.append(Quantity(item.quantity))

        # Phase 2: resolve snapshots and price
        line_items: list[OrderLineItem] = []
        subtotal = Money.zero(self._currency)
        for item, quantity in zip(cart_items, quantities):
            product = self._product_repo.get_by_id(item.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID {item.product_id} not found.")

            variant = product.find_variant(item.variant_id)
            if variant is None:
                raise EntityNotFoundError(
                    f"Variant with ID {item.variant_id} not found for product "
                    f"\"{product.name}\"."
                )

            vendor_name = self._user_directory.get_vendor_display_name(product.vendor_id)
            if vendor_name is None:
                raise EntityNotFoundError(f"Vendor for product \"{product.name}\" not found.")

            line = OrderLineItem.from_snapshot(product.snapshot(variant, vendor_name), quantity)
            line_items.append(line)
            subtotal = subtotal + line.line_total

        return PricedCart(items=line_items, subtotal=subtotal)
