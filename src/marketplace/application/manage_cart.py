"""Application services: cart use cases.

Carts hold unpriced choices only, so none of these touch the catalog;
unknown products surface at checkout.
"""

from __future__ import annotations

from marketplace.application.dto import CartDTO
from marketplace.domain.exceptions import EntityNotFoundError
from marketplace.domain.model.cart import Cart
from marketplace.domain.repository.cart_repository import CartRepository


class ShowCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str) -> CartDTO:
        cart = self._cart_repo.get_for_user(user_id) or Cart(user_id=user_id)
        return CartDTO.from_cart(cart)


class AddToCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str, product_id: str, variant_id: str, quantity: int) -> CartDTO:
        cart = self._cart_repo.get_for_user(user_id) or Cart(user_id=user_id)
        cart.add(product_id, variant_id, quantity)
        self._cart_repo.save(cart)
        return CartDTO.from_cart(cart)


class UpdateCartItemHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str, product_id: str, variant_id: str, quantity: int) -> CartDTO:
        cart = _existing_cart(self._cart_repo, user_id)
        cart.update(product_id, variant_id, quantity)
        self._cart_repo.save(cart)
        return CartDTO.from_cart(cart)


class RemoveFromCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str, product_id: str, variant_id: str) -> CartDTO:
        cart = _existing_cart(self._cart_repo, user_id)
        cart.remove(product_id, variant_id)
        self._cart_repo.save(cart)
        return CartDTO.from_cart(cart)


class ClearCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str) -> None:
        cart = self._cart_repo.get_for_user(user_id)
        if cart is not None:
            cart.clear()
            self._cart_repo.save(cart)


def _existing_cart(cart_repo: CartRepository, user_id: str) -> Cart:
    cart = cart_repo.get_for_user(user_id)
    if cart is None:
        raise EntityNotFoundError("Cart not found")
    return cart
