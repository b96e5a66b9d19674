"""JSON-file-backed implementation of ProductRepository (read-only)."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from marketplace.domain.model.product import Product, ProductVariant, VariantDuration
from marketplace.domain.model.value_objects import Money
from marketplace.domain.repository.product_repository import ProductRepository
from marketplace.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path, currency: str) -> None:
        self._file = JsonFile(file_path, empty=[])
        self._currency = currency

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._file.load():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._file.load()]

    # --- Serialization helpers ------------------------------------------------

    def _to_domain(self, raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            vendor_id=raw["vendor_id"],
            variants=[self._variant_to_domain(v) for v in raw.get("variants", [])],
        )

    def _variant_to_domain(self, raw: dict) -> ProductVariant:
        duration = VariantDuration(raw.get("duration") or VariantDuration.ONE_TIME.value)
        base_price = Money(Decimal(raw["base_price"]), self._currency)
        discount = Decimal(raw.get("discount", "0"))
        if raw.get("selling_price") is None:
            # Catalog rows written before the price was derived
            return ProductVariant.create(
                raw["id"], raw["name"], base_price, discount, duration
            )
        return ProductVariant(
            id=raw["id"],
            name=raw["name"],
            base_price=base_price,
            discount=discount,
            selling_price=Money(Decimal(raw["selling_price"]), self._currency),
            duration=duration,
        )
