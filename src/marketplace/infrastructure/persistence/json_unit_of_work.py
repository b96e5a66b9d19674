"""JSON-file-backed implementation of UnitOfWork.

Writes are staged in memory.  ``commit()`` holds a lock file in the data
directory from the coupon version check through both file writes, so
checkouts in other processes cannot interleave with it.  Coupons are written
first; if the order write then fails, the previous coupon document is
written back before ``PersistenceError`` reaches the caller.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filelock import FileLock, Timeout

from marketplace.domain.exceptions import PersistenceError
from marketplace.domain.model.coupon import Coupon, normalize_code
from marketplace.domain.model.order import Order
from marketplace.domain.repository.coupon_repository import CouponRepository
from marketplace.domain.repository.order_repository import OrderRepository
from marketplace.domain.repository.unit_of_work import UnitOfWork
from marketplace.infrastructure.persistence.json_coupon_repository import (
    JsonCouponRepository,
)
from marketplace.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)

logger = logging.getLogger(__name__)


class _StagedOrderRepository(OrderRepository):

    def __init__(self, committed: JsonOrderRepository) -> None:
        self._committed = committed
        self.staged: dict[str, Order] = {}

    def get_by_id(self, order_id: str) -> Order | None:
        return self.staged.get(order_id) or self._committed.get_by_id(order_id)

    def get_by_reference(self, reference: str) -> Order | None:
        for order in self.staged.values():
            if order.transaction_reference == reference:
                return order
        return self._committed.get_by_reference(reference)

    def list_for_buyer(self, buyer_id: str) -> list[Order]:
        merged = {o.id: o for o in self._committed.list_for_buyer(buyer_id)}
        merged.update({o.id: o for o in self.staged.values() if o.buyer_id == buyer_id})
        return sorted(merged.values(), key=lambda o: o.created_at, reverse=True)

    def save(self, order: Order) -> None:
        self.staged[order.id] = order


class _StagedCouponRepository(CouponRepository):

    def __init__(self, committed: JsonCouponRepository) -> None:
        self._committed = committed
        self.staged: dict[str, Coupon] = {}

    def get_by_code(self, code: str) -> Coupon | None:
        code = normalize_code(code)
        return self.staged.get(code) or self._committed.get_by_code(code)

    def save(self, coupon: Coupon) -> None:
        self.staged[coupon.code] = coupon


class JsonUnitOfWork(UnitOfWork):

    def __init__(
        self,
        orders_path: Path,
        coupons_path: Path,
        lock_path: Path | None = None,
        lock_timeout: float = 10.0,
    ) -> None:
        self._order_repo = JsonOrderRepository(orders_path)
        self._coupon_repo = JsonCouponRepository(coupons_path)
        self._lock = FileLock(
            str(lock_path or orders_path.parent / ".commit.lock"), timeout=lock_timeout
        )
        self.orders = _StagedOrderRepository(self._order_repo)
        self.coupons = _StagedCouponRepository(self._coupon_repo)

    async def commit(self) -> None:
        coupons = list(self.coupons.staged.values())
        orders = list(self.orders.staged.values())
        try:
            if coupons or orders:
                with self._lock:
                    self._write(coupons, orders)
        except Timeout as exc:
            logger.error("Timed out waiting for commit lock %s", self._lock.lock_file)
            raise PersistenceError(
                "Data directory is busy with another commit; please retry"
            ) from exc
        finally:
            self._clear()

    async def rollback(self) -> None:
        if self.orders.staged or self.coupons.staged:
            logger.warning(
                "Rolling back %d order(s) and %d coupon(s)",
                len(self.orders.staged), len(self.coupons.staged),
            )
        self._clear()

    def _write(self, coupons: list[Coupon], orders: list[Order]) -> None:
        """Check versions and write both files. Caller holds the commit lock."""
        before = None
        try:
            if coupons:
                before = self._coupon_repo.snapshot()
                self._coupon_repo.save_all(coupons)
        except (OSError, ValueError) as exc:
            logger.error("Coupon write failed: %s", exc)
            raise PersistenceError(f"Could not commit changes: {exc}") from exc

        try:
            if orders:
                self._order_repo.save_all(orders)
        except (OSError, ValueError) as exc:
            logger.error("Order write failed, restoring coupons: %s", exc)
            if before is not None:
                self._restore_coupons(before)
            raise PersistenceError(f"Could not commit changes: {exc}") from exc

    def _restore_coupons(self, document: dict) -> None:
        try:
            self._coupon_repo.restore(document)
        except OSError:
            logger.exception(
                "Could not restore %s; coupon redemptions may lack their order",
                self._coupon_repo.path,
            )

    def _clear(self) -> None:
        self.orders.staged.clear()
        self.coupons.staged.clear()
