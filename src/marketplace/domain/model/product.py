"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
vendors edit names and prices, add and drop variants. Orders never hold a
reference to a live Product, only a ``ProductSnapshot`` taken at checkout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from marketplace.domain.exceptions import ValidationError
from marketplace.domain.model.value_objects import Money


class VariantDuration(Enum):
    LIFETIME = "Lifetime"
    MONTHLY = "Monthly"
    ANNUALLY = "Annually"
    ONE_TIME = "One-time"


@dataclass(frozen=True)
class ProductVariant:
    """A purchasable SKU of a product.

    ``selling_price`` is derived once, when the variant is saved, and is
    treated as fixed from then on. Use ``ProductVariant.create()`` to build
    a new variant so the derivation happens in one place.
    """

    id: str
    name: str
    base_price: Money
    discount: Decimal
    selling_price: Money
    duration: VariantDuration = VariantDuration.ONE_TIME

    @staticmethod
    def create(
        id: str,
        name: str,
        base_price: Money,
        discount: Decimal = Decimal("0"),
        duration: VariantDuration = VariantDuration.ONE_TIME,
    ) -> ProductVariant:
        if not name or not name.strip():
            raise ValidationError("Variant name is required")
        if not discount.is_finite() or not Decimal("0") <= discount <= Decimal("100"):
            raise ValidationError(
                f"Variant discount must be between 0 and 100, got {discount}"
            )
        selling_price = base_price.scale(Decimal("1") - discount / Decimal("100"))
        return ProductVariant(
            id=id,
            name=name.strip(),
            base_price=base_price,
            discount=discount,
            selling_price=selling_price,
            duration=duration,
        )


@dataclass(frozen=True)
class ProductSnapshot:
    """Read-only view of a product variant as priced at checkout time."""

    product_id: str
    name: str
    vendor_id: str
    vendor_display_name: str
    variant: ProductVariant


@dataclass
class Product:
    """A product in the catalog, owned by one vendor."""

    id: str
    name: str
    vendor_id: str
    variants: list[ProductVariant] = field(default_factory=list)

    def find_variant(self, variant_id: str) -> ProductVariant | None:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def snapshot(self, variant: ProductVariant, vendor_display_name: str) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=self.id,
            name=self.name,
            vendor_id=self.vendor_id,
            vendor_display_name=vendor_display_name,
            variant=variant,
        )
