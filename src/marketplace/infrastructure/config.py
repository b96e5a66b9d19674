"""Settings loaded from the environment (and an optional ``.env`` file).

Only the composition root reads ``Settings``.  The checkout flow receives
an explicit ``CheckoutConfig`` built from it and never looks at the
environment itself.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

from marketplace.application.checkout import CheckoutConfig, LoyaltyCouponPolicy
from marketplace.domain.exceptions import ConfigurationError
from marketplace.domain.model.value_objects import DEFAULT_CURRENCY

# Repo root when installed in editable mode
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    currency: str
    tax_rate: Decimal
    log_level: str
    paystack_secret_key: str
    paystack_base_url: str
    paystack_callback_url: str
    gateway_timeout: float
    email_host: str | None
    email_port: int
    email_username: str | None
    email_password: str | None
    email_from: str
    loyalty_percent: Decimal
    loyalty_days: int
    loyalty_min_order: Decimal

    def checkout_config(self) -> CheckoutConfig:
        return CheckoutConfig(
            currency=self.currency,
            tax_rate=self.tax_rate,
            gateway_timeout=self.gateway_timeout,
            loyalty=LoyaltyCouponPolicy(
                percent=self.loyalty_percent,
                valid_for=timedelta(days=self.loyalty_days),
                min_order_amount=self.loyalty_min_order,
            ),
        )


def load_settings(env_file: Path | None = None) -> Settings:
    """Read settings, letting real environment variables win over ``.env``."""
    load_dotenv(env_file)

    tax_rate = _decimal("MARKETPLACE_TAX_RATE", "0.05")
    if tax_rate < 0:
        raise ConfigurationError("MARKETPLACE_TAX_RATE cannot be negative")
    timeout = _number("PAYMENT_GATEWAY_TIMEOUT", "15", float)
    if timeout <= 0:
        raise ConfigurationError("PAYMENT_GATEWAY_TIMEOUT must be positive")
    loyalty_percent = _decimal("LOYALTY_COUPON_PERCENT", "15")
    if not Decimal("0") <= loyalty_percent <= Decimal("100"):
        raise ConfigurationError("LOYALTY_COUPON_PERCENT must be between 0 and 100")

    base_url = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")
    return Settings(
        data_dir=Path(os.getenv("MARKETPLACE_DATA_DIR") or _DEFAULT_DATA_DIR),
        currency=os.getenv("MARKETPLACE_CURRENCY", DEFAULT_CURRENCY).upper(),
        tax_rate=tax_rate,
        log_level=os.getenv("MARKETPLACE_LOG_LEVEL", "INFO").upper(),
        paystack_secret_key=os.getenv("PAYSTACK_SECRET_KEY", ""),
        paystack_base_url=base_url,
        paystack_callback_url=os.getenv(
            "PAYSTACK_CALLBACK_URL", "http://localhost:3000/api/v1/payments/verify"
        ),
        gateway_timeout=timeout,
        email_host=os.getenv("EMAIL_HOST") or None,
        email_port=_number("EMAIL_PORT", "587", int),
        email_username=os.getenv("EMAIL_USERNAME") or None,
        email_password=os.getenv("EMAIL_PASSWORD") or None,
        email_from=os.getenv("EMAIL_FROM", "Marketplace <no-reply@localhost>"),
        loyalty_percent=loyalty_percent,
        loyalty_days=_number("LOYALTY_COUPON_DAYS", "30", int),
        loyalty_min_order=_decimal("LOYALTY_COUPON_MIN_ORDER", "1000"),
    )


def _decimal(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if not value.is_finite():
        raise ConfigurationError(f"{name} must be a finite number, got {raw!r}")
    return value


def _number(name: str, default: str, kind: type):
    raw = os.getenv(name, default)
    try:
        value = kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {raw!r}")
    return value
