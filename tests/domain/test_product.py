"""Unit tests for the Product aggregate and selling price derivation."""

from decimal import Decimal

import pytest

from marketplace.domain.exceptions import ValidationError
from marketplace.domain.model.product import Product, ProductVariant, VariantDuration
from marketplace.domain.model.value_objects import Money


class TestVariantSellingPrice:

    def test_selling_price_is_base_minus_discount(self):
        v = ProductVariant.create("V1", "Basic", Money.of("1000"), Decimal("20"))
        assert v.selling_price == Money.of("800")

    def test_no_discount_keeps_base_price(self):
        v = ProductVariant.create("V1", "Basic", Money.of("1000"))
        assert v.selling_price == Money.of("1000")
        assert v.duration == VariantDuration.ONE_TIME

    def test_selling_price_rounded_to_cent(self):
        v = ProductVariant.create("V1", "Basic", Money.of("99.99"), Decimal("33"))
        assert v.selling_price == Money.of("66.99")

    def test_discount_above_100_rejected(self):
        with pytest.raises(ValidationError, match="between 0 and 100"):
            ProductVariant.create("V1", "Basic", Money.of("10"), Decimal("101"))

    def test_nan_discount_rejected(self):
        with pytest.raises(ValidationError, match="between 0 and 100"):
            ProductVariant.create("V1", "Basic", Money.of("10"), Decimal("NaN"))

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError, match="Variant name is required"):
            ProductVariant.create("V1", " ", Money.of("10"))


class TestProduct:

    def _product(self) -> Product:
        return Product(
            id="P1",
            name="Antivirus Pro",
            vendor_id="vendor-1",
            variants=[
                ProductVariant.create("V1", "Basic", Money.of("1000")),
                ProductVariant.create(
                    "V2", "Family", Money.of("2500"), duration=VariantDuration.ANNUALLY
                ),
            ],
        )

    def test_find_variant(self):
        assert self._product().find_variant("V2").name == "Family"

    def test_find_unknown_variant_returns_none(self):
        assert self._product().find_variant("nope") is None

    def test_snapshot_carries_vendor_name_and_variant(self):
        product = self._product()
        snap = product.snapshot(product.find_variant("V1"), "Ada Software Ltd")
        assert snap.product_id == "P1"
        assert snap.vendor_display_name == "Ada Software Ltd"
        assert snap.variant.selling_price == Money.of("1000")
