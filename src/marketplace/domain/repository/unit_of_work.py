"""Unit of Work: the transaction boundary for orders and coupons.

Order creation and coupon bookkeeping must commit or roll back together.
A unit of work is an async context manager::

    async with uow_factory() as uow:
        uow.coupons.save(coupon)
        uow.orders.save(order)

Leaving the block normally commits; leaving it with an exception rolls
back and re-raises.  Writes made through ``uow.orders`` / ``uow.coupons``
are staged and only become visible to other readers on commit.

Implementations must make ``commit()`` atomic and must raise
``ConcurrencyConflict`` when a staged coupon was changed by someone else
since it was read (compare ``Coupon.version``), or when a new coupon code
is already taken.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from marketplace.domain.repository.coupon_repository import CouponRepository
from marketplace.domain.repository.order_repository import OrderRepository


class UnitOfWork(ABC):

    orders: OrderRepository
    coupons: CouponRepository

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        """Apply every staged write atomically."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard every staged write."""
