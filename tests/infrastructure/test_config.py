"""Tests for environment-driven settings."""

from datetime import timedelta
from decimal import Decimal

import pytest

from marketplace.domain.exceptions import ConfigurationError
from marketplace.infrastructure.config import load_settings

_VARS = [
    "MARKETPLACE_DATA_DIR",
    "MARKETPLACE_CURRENCY",
    "MARKETPLACE_TAX_RATE",
    "MARKETPLACE_LOG_LEVEL",
    "PAYMENT_GATEWAY_TIMEOUT",
    "EMAIL_HOST",
    "EMAIL_PORT",
    "LOYALTY_COUPON_PERCENT",
    "LOYALTY_COUPON_DAYS",
    "LOYALTY_COUPON_MIN_ORDER",
]


@pytest.fixture
def env(monkeypatch, tmp_path):
    # load_dotenv writes os.environ directly; setting first makes teardown remove it
    for name in _VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("MARKETPLACE_DATA_DIR", str(tmp_path))
    return monkeypatch


class TestSettings:

    def test_defaults(self, env, tmp_path):
        settings = load_settings(tmp_path / "missing.env")
        assert settings.data_dir == tmp_path
        assert settings.currency == "NGN"
        assert settings.tax_rate == Decimal("0.05")
        assert settings.gateway_timeout == 15.0
        assert settings.email_host is None

        config = settings.checkout_config()
        assert config.loyalty.percent == Decimal("15")
        assert config.loyalty.valid_for == timedelta(days=30)
        assert config.loyalty.min_order_amount == Decimal("1000")

    def test_env_file_is_read(self, env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MARKETPLACE_TAX_RATE=0.075\nMARKETPLACE_CURRENCY=usd\n")
        settings = load_settings(env_file)
        assert settings.tax_rate == Decimal("0.075")
        assert settings.currency == "USD"

    def test_real_environment_wins_over_env_file(self, env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MARKETPLACE_TAX_RATE=0.075\n")
        env.setenv("MARKETPLACE_TAX_RATE", "0.1")
        assert load_settings(env_file).tax_rate == Decimal("0.1")

    @pytest.mark.parametrize(
        "name, value",
        [
            ("MARKETPLACE_TAX_RATE", "abc"),
            ("MARKETPLACE_TAX_RATE", "-0.1"),
            ("PAYMENT_GATEWAY_TIMEOUT", "0"),
            ("EMAIL_PORT", "smtp"),
            ("LOYALTY_COUPON_PERCENT", "150"),
            ("MARKETPLACE_TAX_RATE", "nan"),
            ("LOYALTY_COUPON_MIN_ORDER", "sNaN"),
            ("PAYMENT_GATEWAY_TIMEOUT", "inf"),
            ("LOYALTY_COUPON_DAYS", "1e400"),
        ],
    )
    def test_invalid_values(self, env, tmp_path, name, value):
        env.setenv(name, value)
        with pytest.raises(ConfigurationError, match=name):
            load_settings(tmp_path / "missing.env")
