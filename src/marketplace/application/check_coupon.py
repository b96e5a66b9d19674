"""Application service: Check Coupon use case (query).

Previews what a coupon would take off an order without redeeming it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from marketplace.application.dto import CouponCheckDTO
from marketplace.domain.model.coupon import normalize_code
from marketplace.domain.model.value_objects import Money
from marketplace.domain.repository.coupon_repository import CouponRepository
from marketplace.domain.service.coupon_validator import CouponValidator


class CheckCouponHandler:

    def __init__(
        self,
        coupon_repo: CouponRepository,
        currency: str,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._validator = CouponValidator(coupon_repo)
        self._currency = currency
        self._clock = clock

    def handle(self, code: str, subtotal: str, user_id: str) -> CouponCheckDTO:
        check = self._validator.validate(
            code, Money.of(subtotal, self._currency), user_id, self._clock()
        )
        if check.ok:
            return CouponCheckDTO(
                code=normalize_code(code),
                valid=True,
                discount=str(check.discount),
                message="Coupon can be applied.",
            )
        return CouponCheckDTO(
            code=normalize_code(code),
            valid=False,
            discount=None,
            message=check.reason.message,
        )
