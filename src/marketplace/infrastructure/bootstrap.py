"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable

from marketplace.application.checkout import CheckoutHandler
from marketplace.application.ports import CouponNotifier, PaymentGateway
from marketplace.domain.repository.unit_of_work import UnitOfWork
from marketplace.infrastructure.config import Settings, load_settings
from marketplace.infrastructure.notifications.coupon_notifiers import (
    LoggingCouponNotifier,
    SmtpCouponNotifier,
)
from marketplace.infrastructure.payments.paystack_gateway import PaystackGateway
from marketplace.infrastructure.persistence.json_cart_repository import JsonCartRepository
from marketplace.infrastructure.persistence.json_coupon_repository import (
    JsonCouponRepository,
)
from marketplace.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from marketplace.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from marketplace.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from marketplace.infrastructure.persistence.json_user_directory import JsonUserDirectory

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def settings() -> Settings:
    return load_settings()


def product_repository() -> JsonProductRepository:
    s = settings()
    return JsonProductRepository(s.data_dir / "products.json", s.currency)


def user_directory() -> JsonUserDirectory:
    return JsonUserDirectory(settings().data_dir / "users.json")


def cart_repository() -> JsonCartRepository:
    return JsonCartRepository(settings().data_dir / "carts.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(settings().data_dir / "orders.json")


def coupon_repository() -> JsonCouponRepository:
    return JsonCouponRepository(settings().data_dir / "coupons.json")


def unit_of_work_factory() -> Callable[[], UnitOfWork]:
    data_dir = settings().data_dir
    return lambda: JsonUnitOfWork(data_dir / "orders.json", data_dir / "coupons.json")


def payment_gateway() -> PaymentGateway:
    s = settings()
    if not s.paystack_secret_key:
        logger.warning("PAYSTACK_SECRET_KEY is not set; gateway calls will be rejected")
    return PaystackGateway(
        secret_key=s.paystack_secret_key,
        callback_url=s.paystack_callback_url,
        base_url=s.paystack_base_url,
        timeout=s.gateway_timeout,
    )


def coupon_notifier() -> CouponNotifier:
    s = settings()
    if s.email_host is None:
        return LoggingCouponNotifier()
    return SmtpCouponNotifier(
        host=s.email_host,
        port=s.email_port,
        sender=s.email_from,
        username=s.email_username,
        password=s.email_password,
    )


def checkout_handler() -> CheckoutHandler:
    return CheckoutHandler(
        uow_factory=unit_of_work_factory(),
        product_repo=product_repository(),
        user_directory=user_directory(),
        payment_gateway=payment_gateway(),
        notifier=coupon_notifier(),
        config=settings().checkout_config(),
    )
