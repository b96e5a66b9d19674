"""Coupon aggregate.

A coupon is *consumable* only while it is active, unexpired and below its
usage limit.  A coupon restricted to one user is usable only by that user;
an unrestricted coupon is usable at most once per user.

``version`` is bumped by the repository on every committed write and is
what a unit of work compares to detect concurrent redemptions.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

from marketplace.domain.exceptions import ValidationError
from marketplace.domain.model.value_objects import Money

MIN_CODE_LENGTH = 4
LOYALTY_CODE_PREFIX = "ORDER-"
_CODE_ALPHABET = string.ascii_uppercase + string.digits


class CouponKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponRejection(Enum):
    """Why a coupon cannot be applied, in the order the checks run."""

    UNKNOWN_CODE = "unknown_code"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    USAGE_LIMIT_REACHED = "usage_limit_reached"
    BELOW_MINIMUM_ORDER = "below_minimum_order"
    NOT_FOR_USER = "not_for_user"
    ALREADY_USED = "already_used"

    @property
    def message(self) -> str:
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES = {
    CouponRejection.UNKNOWN_CODE: "Invalid coupon code.",
    CouponRejection.INACTIVE: "Coupon is inactive.",
    CouponRejection.EXPIRED: "Coupon has expired.",
    CouponRejection.USAGE_LIMIT_REACHED: "Coupon has reached its maximum usage limit.",
    CouponRejection.BELOW_MINIMUM_ORDER: "Minimum order amount not met.",
    CouponRejection.NOT_FOR_USER: "This coupon is not for your account.",
    CouponRejection.ALREADY_USED: "You have already used this coupon.",
}


def normalize_code(code: str) -> str:
    return code.strip().upper()


def generate_loyalty_code() -> str:
    suffix = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(8))
    return f"{LOYALTY_CODE_PREFIX}{suffix}"


@dataclass
class Coupon:
    code: str
    kind: CouponKind
    value: Decimal
    expires_at: datetime
    min_order_amount: Money
    max_uses: int = 1
    uses_count: int = 0
    restricted_to_user_id: str | None = None
    used_by_user_ids: set[str] = field(default_factory=set)
    is_active: bool = True
    version: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def create(
        code: str,
        kind: CouponKind,
        value: Decimal,
        expires_at: datetime,
        min_order_amount: Money,
        max_uses: int = 1,
        restricted_to_user_id: str | None = None,
    ) -> Coupon:
        """Create a new coupon, enforcing all invariants."""
        code = normalize_code(code)
        if len(code) < MIN_CODE_LENGTH:
            raise ValidationError(
                f"Coupon code must be at least {MIN_CODE_LENGTH} characters long"
            )
        if not value.is_finite():
            raise ValidationError(f"Coupon value must be a finite number, got {value}")
        if value < 0:
            raise ValidationError("Coupon value cannot be negative")
        if kind == CouponKind.PERCENTAGE and value > 100:
            raise ValidationError("Percentage coupon value cannot exceed 100")
        if max_uses < 0:
            raise ValidationError("Max uses cannot be negative")
        if expires_at.tzinfo is None:
            raise ValidationError("Coupon expiry must be timezone-aware")
        return Coupon(
            code=code,
            kind=kind,
            value=value,
            expires_at=expires_at,
            min_order_amount=min_order_amount,
            max_uses=max_uses,
            restricted_to_user_id=restricted_to_user_id,
        )

    @staticmethod
    def loyalty(
        user_id: str,
        percent: Decimal,
        valid_for: timedelta,
        min_order_amount: Money,
        now: datetime,
        code: str | None = None,
    ) -> Coupon:
        """Single-use coupon for one buyer, issued after a successful order."""
        return Coupon.create(
            code=code or generate_loyalty_code(),
            kind=CouponKind.PERCENTAGE,
            value=percent,
            expires_at=now + valid_for,
            min_order_amount=min_order_amount,
            max_uses=1,
            restricted_to_user_id=user_id,
        )

    # --- Queries --------------------------------------------------------------

    def is_consumable(self, now: datetime) -> bool:
        return self.is_active and now < self.expires_at and self.uses_count < self.max_uses

    def rejection_for(
        self, subtotal: Money, user_id: str, now: datetime
    ) -> CouponRejection | None:
        """Return the first failing check, or None when the coupon applies."""
        if not self.is_active:
            return CouponRejection.INACTIVE
        if now >= self.expires_at:
            return CouponRejection.EXPIRED
        if self.uses_count >= self.max_uses:
            return CouponRejection.USAGE_LIMIT_REACHED
        if subtotal < self.min_order_amount:
            return CouponRejection.BELOW_MINIMUM_ORDER
        if self.restricted_to_user_id is not None:
            if self.restricted_to_user_id != user_id:
                return CouponRejection.NOT_FOR_USER
        elif user_id in self.used_by_user_ids:
            return CouponRejection.ALREADY_USED
        return None

    def discount_for(self, subtotal: Money) -> Money:
        if self.kind == CouponKind.PERCENTAGE:
            discount = subtotal.percent(self.value)
        else:
            discount = Money(self.value, subtotal.currency)
        return discount.min(subtotal)

    # --- Mutations ------------------------------------------------------------

    def redeem(self, user_id: str, now: datetime) -> None:
        """Record one use by *user_id*. Only call after a successful check."""
        if not self.is_consumable(now):
            raise ValidationError(f"Coupon {self.code} is not consumable")
        self.uses_count += 1
        self.used_by_user_ids.add(user_id)
        self.updated_at = now
