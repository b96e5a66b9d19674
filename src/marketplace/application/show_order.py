"""Application service: Show Order use case (query)."""

from __future__ import annotations

from marketplace.application.dto import OrderDTO
from marketplace.domain.exceptions import EntityNotFoundError
from marketplace.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str, buyer_id: str) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        # Someone else's order is reported exactly like a missing one
        if order is None or order.buyer_id != buyer_id:
            raise EntityNotFoundError("No order found with that ID for this user.")
        return OrderDTO.from_order(order)
