"""CouponNotifier implementations.

``SmtpCouponNotifier`` sends a plain-text email through an SMTP relay.
``LoggingCouponNotifier`` only logs; it is wired in when no SMTP host is
configured (local runs, demos).
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from datetime import datetime
from decimal import Decimal
from email.message import EmailMessage

from marketplace.application.ports import CouponEmailContext, CouponNotifier
from marketplace.domain.model.coupon import CouponKind

logger = logging.getLogger(__name__)


def _describe(value: Decimal, kind: CouponKind, currency: str) -> str:
    if kind == CouponKind.PERCENTAGE:
        return f"{value.normalize():f}% off"
    return f"{currency} {value:,.2f} off"


def render_coupon_email(
    coupon_code: str,
    value: Decimal,
    kind: CouponKind,
    expires_at: datetime,
    context: CouponEmailContext,
) -> tuple[str, str]:
    """Return (subject, body) for a loyalty coupon email."""
    discount = _describe(value, kind, context.total_amount.currency)
    subject = f"Thanks for your order! Here's {discount} your next one"
    body = (
        f"Thank you for your order {context.order_id} "
        f"({context.product_names}, total {context.total_amount}).\n\n"
        f"Use coupon code {coupon_code} for {discount} your next purchase.\n"
        f"The code expires on {expires_at:%Y-%m-%d} and can be used once.\n"
    )
    return subject, body


class SmtpCouponNotifier(CouponNotifier):

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._timeout = timeout

    async def send_coupon_email(
        self,
        to_email: str,
        coupon_code: str,
        value: Decimal,
        kind: CouponKind,
        expires_at: datetime,
        context: CouponEmailContext,
    ) -> None:
        subject, body = render_coupon_email(coupon_code, value, kind, expires_at, context)
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)
        await asyncio.to_thread(self._send, message)
        logger.info("Coupon %s emailed to %s", coupon_code, to_email)

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._username:
                smtp.starttls()
                smtp.login(self._username, self._password or "")
            smtp.send_message(message)


class LoggingCouponNotifier(CouponNotifier):

    async def send_coupon_email(
        self,
        to_email: str,
        coupon_code: str,
        value: Decimal,
        kind: CouponKind,
        expires_at: datetime,
        context: CouponEmailContext,
    ) -> None:
        subject, _ = render_coupon_email(coupon_code, value, kind, expires_at, context)
        logger.info("Coupon email to %s: %s [%s]", to_email, subject, coupon_code)
