"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from marketplace.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_reference(self, reference: str) -> Order | None:
        """Return the order paid through gateway *reference*, or None."""

    @abstractmethod
    def list_for_buyer(self, buyer_id: str) -> list[Order]:
        """Return every order of a buyer, newest first."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""
