"""Tests for the coupon use cases (create and check)."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from marketplace.application.check_coupon import CheckCouponHandler
from marketplace.application.create_coupon import CreateCouponHandler
from marketplace.domain.exceptions import ValidationError
from tests.fakes import UnitOfWorkFactory

NOW = datetime(2026, 5, 1, tzinfo=timezone.utc)


def _create(factory, code="WELCOME10", kind="percentage", value="10", **kwargs):
    handler = CreateCouponHandler(uow_factory=factory, currency="NGN")
    return asyncio.run(
        handler.handle(code, kind, value, kwargs.pop("expires_at", NOW + timedelta(days=5)), **kwargs)
    )


class TestCreateCoupon:

    def test_create(self):
        factory = UnitOfWorkFactory()
        dto = _create(factory, code="welcome10", min_order_amount="500", max_uses=3)
        assert dto.code == "WELCOME10"
        assert dto.kind == "percentage"
        assert dto.min_order_amount == "NGN 500.00"
        assert dto.uses == "0/3"
        assert factory.coupons.get_by_code("WELCOME10") is not None

    def test_duplicate_code_rejected(self):
        factory = UnitOfWorkFactory()
        _create(factory)
        with pytest.raises(ValidationError, match="already exists"):
            _create(factory, code="Welcome10")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError, match="'percentage' or 'fixed'"):
            _create(UnitOfWorkFactory(), kind="bogo")

    def test_bad_value_rejected(self):
        with pytest.raises(ValidationError, match="Invalid coupon value"):
            _create(UnitOfWorkFactory(), value="ten")

    @pytest.mark.parametrize("value", ["NaN", "sNaN", "Infinity"])
    def test_non_finite_value_rejected(self, value):
        with pytest.raises(ValidationError, match="Invalid coupon value"):
            _create(UnitOfWorkFactory(), kind="fixed", value=value)


class TestCheckCoupon:

    def _handler(self, factory):
        return CheckCouponHandler(factory.coupons, "NGN", clock=lambda: NOW)

    def test_applicable(self):
        factory = UnitOfWorkFactory()
        _create(factory)
        dto = self._handler(factory).handle("welcome10", "2000", "buyer-1")
        assert dto.valid
        assert dto.discount == "NGN 200.00"
        assert dto.message == "Coupon can be applied."

    def test_below_minimum(self):
        factory = UnitOfWorkFactory()
        _create(factory, min_order_amount="5000")
        dto = self._handler(factory).handle("WELCOME10", "2000", "buyer-1")
        assert not dto.valid
        assert dto.discount is None
        assert dto.message == "Minimum order amount not met."

    def test_check_does_not_redeem(self):
        factory = UnitOfWorkFactory()
        _create(factory, max_uses=1)
        self._handler(factory).handle("WELCOME10", "2000", "buyer-1")
        assert factory.coupons.get_by_code("WELCOME10").uses_count == 0
