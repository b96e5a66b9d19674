"""Ports for the external collaborators of the application layer.

Adapters live in ``marketplace.infrastructure``; tests use fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from marketplace.domain.model.coupon import CouponKind
from marketplace.domain.model.value_objects import Money


@dataclass(frozen=True)
class PaymentSession:
    """What the buyer needs to complete payment on the gateway's page."""

    reference: str
    redirect_url: str
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentVerification:
    status: str  # "success" or "failed"
    metadata: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class PaymentGateway(ABC):
    """Third-party payment provider.

    Implementations raise ``PaymentGatewayError`` for every failure,
    including timeouts and rejected requests.
    """

    @abstractmethod
    async def create_session(
        self,
        amount: Money,
        email: str,
        order_id: str,
        metadata: dict[str, Any],
    ) -> PaymentSession:
        """Start a transaction for *amount* (sent in minor units)."""

    @abstractmethod
    async def verify(self, reference: str) -> PaymentVerification:
        """Ask the gateway for the final outcome of a transaction."""

    @abstractmethod
    async def refund(self, reference: str, amount: Money | None = None) -> dict[str, Any]:
        """Refund a transaction in full, or partially when *amount* is given."""


@dataclass(frozen=True)
class CouponEmailContext:
    order_id: str
    product_names: str
    total_amount: Money


class CouponNotifier(ABC):
    """Tells a buyer about a coupon they have just been given."""

    @abstractmethod
    async def send_coupon_email(
        self,
        to_email: str,
        coupon_code: str,
        value: Decimal,
        kind: CouponKind,
        expires_at: datetime,
        context: CouponEmailContext,
    ) -> None:
        """Deliver the message. May raise; callers log and move on."""
