"""Tests for coupon email rendering and the logging notifier."""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal

from marketplace.application.ports import CouponEmailContext
from marketplace.domain.model.coupon import CouponKind
from marketplace.domain.model.value_objects import Money
from marketplace.infrastructure.notifications.coupon_notifiers import (
    LoggingCouponNotifier,
    render_coupon_email,
)

CONTEXT = CouponEmailContext(
    order_id="order-1",
    product_names="Antivirus Pro, Backup Suite",
    total_amount=Money.of("2100"),
)
EXPIRES = datetime(2026, 6, 1, tzinfo=timezone.utc)


class TestRenderCouponEmail:

    def test_percentage(self):
        subject, body = render_coupon_email(
            "ORDER-AB12CD34", Decimal("15"), CouponKind.PERCENTAGE, EXPIRES, CONTEXT
        )
        assert "15% off" in subject
        assert "ORDER-AB12CD34" in body
        assert "order-1" in body
        assert "Antivirus Pro, Backup Suite" in body
        assert "NGN 2,100.00" in body
        assert "2026-06-01" in body

    def test_fixed(self):
        subject, _ = render_coupon_email(
            "SAVE500", Decimal("500"), CouponKind.FIXED, EXPIRES, CONTEXT
        )
        assert "NGN 500.00 off" in subject


class TestLoggingNotifier:

    def test_logs_instead_of_sending(self, caplog):
        with caplog.at_level(logging.INFO):
            asyncio.run(
                LoggingCouponNotifier().send_coupon_email(
                    "ada@buyer.example", "ORDER-AB12CD34", Decimal("15"),
                    CouponKind.PERCENTAGE, EXPIRES, CONTEXT,
                )
            )
        assert "ada@buyer.example" in caplog.text
        assert "ORDER-AB12CD34" in caplog.text
