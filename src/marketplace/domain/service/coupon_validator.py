"""Domain service: Coupon validation.

Checks whether a coupon code may be applied to an order and, if so, how
much it takes off.  Read-only: redeeming is the caller's job, inside the
same unit of work that creates the order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from marketplace.domain.model.coupon import Coupon, CouponRejection, normalize_code
from marketplace.domain.model.value_objects import Money
from marketplace.domain.repository.coupon_repository import CouponRepository


@dataclass(frozen=True)
class CouponCheck:
    """Outcome of a validation: either a discount or a rejection reason."""

    ok: bool
    discount: Money | None = None
    reason: CouponRejection | None = None
    coupon: Coupon | None = None

    @staticmethod
    def accepted(coupon: Coupon, discount: Money) -> CouponCheck:
        return CouponCheck(ok=True, discount=discount, coupon=coupon)

    @staticmethod
    def rejected(reason: CouponRejection, coupon: Coupon | None = None) -> CouponCheck:
        return CouponCheck(ok=False, reason=reason, coupon=coupon)


class CouponValidator:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def validate(
        self, code: str, subtotal: Money, user_id: str, now: datetime
    ) -> CouponCheck:
        coupon = self._coupon_repo.get_by_code(normalize_code(code))
        if coupon is None:
            return CouponCheck.rejected(CouponRejection.UNKNOWN_CODE)

        reason = coupon.rejection_for(subtotal, user_id, now)
        if reason is not None:
            return CouponCheck.rejected(reason, coupon)

        return CouponCheck.accepted(coupon, coupon.discount_for(subtotal))
