"""Tests for the cart use cases."""

import pytest

from marketplace.application.manage_cart import (
    AddToCartHandler,
    ClearCartHandler,
    RemoveFromCartHandler,
    ShowCartHandler,
    UpdateCartItemHandler,
)
from marketplace.domain.exceptions import EntityNotFoundError, ValidationError
from tests.fakes import FakeCartRepository


class TestCartUseCases:

    def test_show_empty_cart(self):
        dto = ShowCartHandler(FakeCartRepository()).handle("buyer-1")
        assert dto.user_id == "buyer-1"
        assert dto.items == []

    def test_add_merges_same_variant(self):
        repo = FakeCartRepository()
        AddToCartHandler(repo).handle("buyer-1", "P1", "V1", 1)
        dto = AddToCartHandler(repo).handle("buyer-1", "P1", "V1", 2)
        assert len(dto.items) == 1
        assert dto.items[0].quantity == 3

    def test_add_rejects_zero_quantity(self):
        with pytest.raises(ValidationError):
            AddToCartHandler(FakeCartRepository()).handle("buyer-1", "P1", "V1", 0)

    def test_update_quantity(self):
        repo = FakeCartRepository()
        AddToCartHandler(repo).handle("buyer-1", "P1", "V1", 1)
        dto = UpdateCartItemHandler(repo).handle("buyer-1", "P1", "V1", 5)
        assert dto.items[0].quantity == 5

    def test_update_without_cart(self):
        with pytest.raises(EntityNotFoundError, match="Cart not found"):
            UpdateCartItemHandler(FakeCartRepository()).handle("buyer-1", "P1", "V1", 5)

    def test_remove_item(self):
        repo = FakeCartRepository()
        AddToCartHandler(repo).handle("buyer-1", "P1", "V1", 1)
        AddToCartHandler(repo).handle("buyer-1", "P2", "V2", 1)
        dto = RemoveFromCartHandler(repo).handle("buyer-1", "P1", "V1")
        assert [(i.product_id, i.variant_id) for i in dto.items] == [("P2", "V2")]

    def test_remove_missing_item(self):
        repo = FakeCartRepository()
        AddToCartHandler(repo).handle("buyer-1", "P1", "V1", 1)
        with pytest.raises(EntityNotFoundError, match="Cart item not found"):
            RemoveFromCartHandler(repo).handle("buyer-1", "P9", "V9")

    def test_clear(self):
        repo = FakeCartRepository()
        AddToCartHandler(repo).handle("buyer-1", "P1", "V1", 1)
        ClearCartHandler(repo).handle("buyer-1")
        assert ShowCartHandler(repo).handle("buyer-1").items == []
