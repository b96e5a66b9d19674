"""Application service: Create Coupon use case (marketing flow)."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable

from marketplace.application.dto import CouponDTO
from marketplace.domain.exceptions import ValidationError
from marketplace.domain.model.coupon import Coupon, CouponKind, normalize_code
from marketplace.domain.model.value_objects import Money
from marketplace.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CreateCouponHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork], currency: str) -> None:
        self._uow_factory = uow_factory
        self._currency = currency

    async def handle(
        self,
        code: str,
        kind: str,
        value: str,
        expires_at: datetime,
        min_order_amount: str = "0",
        max_uses: int = 1,
        restricted_to_user_id: str | None = None,
    ) -> CouponDTO:
        try:
            coupon_kind = CouponKind(kind.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Coupon type must be 'percentage' or 'fixed', got {kind!r}"
            )
        try:
            coupon_value = Decimal(value)
        except InvalidOperation:
            raise ValidationError(f"Invalid coupon value: {value!r}")
        if not coupon_value.is_finite():
            raise ValidationError(f"Invalid coupon value: {value!r}")

        coupon = Coupon.create(
            code=code,
            kind=coupon_kind,
            value=coupon_value,
            expires_at=expires_at,
            min_order_amount=Money.of(min_order_amount, self._currency),
            max_uses=max_uses,
            restricted_to_user_id=restricted_to_user_id,
        )

        async with self._uow_factory() as uow:
            if uow.coupons.get_by_code(coupon.code) is not None:
                raise ValidationError(f"Coupon code {normalize_code(code)} already exists")
            uow.coupons.save(coupon)

        logger.info("Coupon %s created (%s %s)", coupon.code, coupon.kind.value, coupon.value)
        return CouponDTO.from_coupon(coupon)
