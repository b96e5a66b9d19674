"""JSON-file-backed implementation of CartRepository."""

from __future__ import annotations

from pathlib import Path

from marketplace.domain.model.cart import Cart, CartItem
from marketplace.domain.repository.cart_repository import CartRepository
from marketplace.infrastructure.persistence.json_file import JsonFile


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty={})

    def get_for_user(self, user_id: str) -> Cart | None:
        raw_items = self._file.load().get(user_id)
        if raw_items is None:
            return None
        return Cart(
            user_id=user_id,
            items=[
                CartItem(i["product_id"], i["variant_id"], i["quantity"])
                for i in raw_items
            ],
        )

    def save(self, cart: Cart) -> None:
        carts = self._file.load()
        carts[cart.user_id] = [
            {
                "product_id": item.product_id,
                "variant_id": item.variant_id,
                "quantity": item.quantity,
            }
            for item in cart.items
        ]
        self._file.persist(carts)
