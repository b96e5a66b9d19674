"""Unit tests for the Coupon validation domain service."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from marketplace.domain.model.coupon import Coupon, CouponKind, CouponRejection
from marketplace.domain.model.value_objects import Money
from marketplace.domain.service.coupon_validator import CouponValidator
from tests.fakes import FakeCouponRepository

NOW = datetime(2026, 5, 1, tzinfo=timezone.utc)


def _validator(*coupons: Coupon) -> CouponValidator:
    return CouponValidator(FakeCouponRepository(list(coupons)))


def _coupon(code="WELCOME", kind=CouponKind.PERCENTAGE, value="10", **kwargs) -> Coupon:
    return Coupon.create(
        code=code,
        kind=kind,
        value=Decimal(value),
        expires_at=kwargs.pop("expires_at", NOW + timedelta(days=1)),
        min_order_amount=kwargs.pop("min_order_amount", Money.of("0")),
        max_uses=kwargs.pop("max_uses", 100),
        **kwargs,
    )


class TestCouponValidator:

    def test_unknown_code(self):
        check = _validator().validate("NOPE", Money.of("100"), "u1", NOW)
        assert not check.ok
        assert check.reason == CouponRejection.UNKNOWN_CODE
        assert check.discount is None

    def test_code_lookup_is_case_insensitive(self):
        check = _validator(_coupon()).validate(" welcome ", Money.of("2000"), "u1", NOW)
        assert check.ok

    def test_percentage_discount(self):
        check = _validator(_coupon(value="15")).validate("WELCOME", Money.of("2000"), "u1", NOW)
        assert check.ok
        assert check.discount == Money.of("300")
        assert check.coupon.code == "WELCOME"

    def test_fixed_discount_clamped(self):
        coupon = _coupon(kind=CouponKind.FIXED, value="3000")
        check = _validator(coupon).validate("WELCOME", Money.of("2000"), "u1", NOW)
        assert check.discount == Money.of("2000")

    def test_restricted_to_other_user(self):
        coupon = _coupon(restricted_to_user_id="u1")
        check = _validator(coupon).validate("WELCOME", Money.of("2000"), "u2", NOW)
        assert check.reason == CouponRejection.NOT_FOR_USER

    def test_exhausted(self):
        coupon = _coupon(max_uses=1)
        coupon.redeem("u9", NOW)
        check = _validator(coupon).validate("WELCOME", Money.of("2000"), "u1", NOW)
        assert check.reason == CouponRejection.USAGE_LIMIT_REACHED

    def test_validation_does_not_consume(self):
        repo = FakeCouponRepository([_coupon(max_uses=1)])
        CouponValidator(repo).validate("WELCOME", Money.of("2000"), "u1", NOW)
        assert repo.get_by_code("WELCOME").uses_count == 0
