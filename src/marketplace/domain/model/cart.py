"""Cart aggregate.

A buyer's cart is a scratch list of (product, variant, quantity) choices.
Nothing in it is priced; prices are resolved only at checkout.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from marketplace.domain.exceptions import EntityNotFoundError
from marketplace.domain.model.value_objects import Quantity


@dataclass(frozen=True)
class CartItem:
    """One requested purchase.

    ``quantity`` is kept as a raw int: checkout input arrives in this shape
    and the pricing engine is where bad quantities are rejected.
    """

    product_id: str
    variant_id: str
    quantity: int


@dataclass
class Cart:
    user_id: str
    items: list[CartItem] = field(default_factory=list)

    def add(self, product_id: str, variant_id: str, quantity: int) -> None:
        """Add an item, merging with an existing line for the same variant."""
        Quantity(quantity)
        index = self._index_of(product_id, variant_id)
        if index is None:
            self.items.append(CartItem(product_id, variant_id, quantity))
        else:
            existing = self.items[index]
            self.items[index] = CartItem(
                product_id, variant_id, existing.quantity + quantity
            )

    def update(self, product_id: str, variant_id: str, quantity: int) -> None:
        Quantity(quantity)
        index = self._index_of(product_id, variant_id)
        if index is None:
            raise EntityNotFoundError("Cart item not found")
        self.items[index] = CartItem(product_id, variant_id, quantity)

    def remove(self, product_id: str, variant_id: str) -> None:
        if self._index_of(product_id, variant_id) is None:
            raise EntityNotFoundError("Cart item not found")
        self.items = [
            item
            for item in self.items
            if not (item.product_id == product_id and item.variant_id == variant_id)
        ]

    def clear(self) -> None:
        self.items = []

    @property
    def is_empty(self) -> bool:
        return not self.items

    def _index_of(self, product_id: str, variant_id: str) -> int | None:
        for i, item in enumerate(self.items):
            if item.product_id == product_id and item.variant_id == variant_id:
                return i
        return None
