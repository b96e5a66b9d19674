"""Application service: Checkout use case.

Turns a cart into a pending order plus a payment session, and rewards the
buyer with a single-use loyalty coupon.  This is the only place that
coordinates the catalog, coupons, orders, the payment gateway and the
notifier.

Steps:
1. Price the cart (fails fast on bad quantities or unknown products).
2. Validate the requested coupon, if any. A rejected coupon aborts the
   checkout with ``InvalidCouponError``; it is never silently dropped.
3. Compute subtotal, discount, tax and total.
4. Stage the pending order and the coupon redemption in a unit of work.
5. Open a payment session. Gateway failure or timeout rolls the unit of
   work back, so no order exists without a payment attempt.
6. Stage a loyalty coupon for the buyer, then commit everything at once.
7. After commit, email the coupon in the background. Failures are logged.

Steps 2-6 run again when the commit loses an optimistic-concurrency race
(e.g. two checkouts redeeming the same single-use coupon); the re-run sees
the winner's write and rejects the exhausted coupon.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

from marketplace.application.dto import CheckoutResultDTO, OrderDTO, PaymentSessionDTO
from marketplace.application.ports import (
    CouponEmailContext,
    CouponNotifier,
    PaymentGateway,
    PaymentSession,
)
from marketplace.domain.exceptions import (
    ConcurrencyConflict,
    InvalidCouponError,
    PaymentGatewayError,
    PersistenceError,
)
from marketplace.domain.model.cart import CartItem
from marketplace.domain.model.coupon import Coupon, generate_loyalty_code, normalize_code
from marketplace.domain.model.order import Order, PaymentMethod
from marketplace.domain.model.value_objects import DEFAULT_CURRENCY, BillingAddress, Money
from marketplace.domain.repository.product_repository import ProductRepository
from marketplace.domain.repository.unit_of_work import UnitOfWork
from marketplace.domain.repository.user_directory import UserDirectory
from marketplace.domain.service.coupon_validator import CouponValidator
from marketplace.domain.service.order_total_calculator import OrderTotalCalculator
from marketplace.domain.service.pricing_service import PricedCart, PricingService

logger = logging.getLogger(__name__)

_LOYALTY_CODE_ATTEMPTS = 5


@dataclass(frozen=True)
class LoyaltyCouponPolicy:
    """Parameters of the coupon issued after every order."""

    percent: Decimal = Decimal("15")
    valid_for: timedelta = timedelta(days=30)
    min_order_amount: Decimal = Decimal("1000")


@dataclass(frozen=True)
class CheckoutConfig:
    currency: str = DEFAULT_CURRENCY
    tax_rate: Decimal = Decimal("0.05")
    gateway_timeout: float = 15.0
    max_commit_attempts: int = 3
    loyalty: LoyaltyCouponPolicy = field(default_factory=LoyaltyCouponPolicy)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        product_repo: ProductRepository,
        user_directory: UserDirectory,
        payment_gateway: PaymentGateway,
        notifier: CouponNotifier,
        config: CheckoutConfig,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._pricing = PricingService(product_repo, user_directory, config.currency)
        self._calculator = OrderTotalCalculator()
        self._gateway = payment_gateway
        self._notifier = notifier
        self._config = config
        self._clock = clock
        self._notifications: set[asyncio.Task] = set()

    async def handle(
        self,
        buyer_id: str,
        cart_items: list[CartItem],
        billing_address: BillingAddress,
        payment_method: PaymentMethod,
        coupon_code: str | None = None,
    ) -> CheckoutResultDTO:
        logger.info("Checkout started for buyer %s (%d items)", buyer_id, len(cart_items))
        priced = self._pricing.price(cart_items)
        code = normalize_code(coupon_code) if coupon_code else None

        attempts = self._config.max_commit_attempts
        for attempt in range(1, attempts + 1):
            try:
                order, session, loyalty = await self._place_order(
                    buyer_id, priced, billing_address, payment_method, code
                )
                break
            except ConcurrencyConflict as exc:
                logger.warning(
                    "Checkout for buyer %s lost a commit race (attempt %d/%d): %s",
                    buyer_id, attempt, attempts, exc,
                )
        else:
            raise PersistenceError(
                f"Checkout could not be committed after {attempts} attempts; please retry"
            )

        logger.info(
            "Order %s placed for buyer %s: total %s, payment reference %s",
            order.id, buyer_id, order.total_amount, session.reference,
        )
        self._notify_in_background(order, loyalty)

        return CheckoutResultDTO(
            order=OrderDTO.from_order(order),
            payment=PaymentSessionDTO(
                reference=session.reference, redirect_url=session.redirect_url
            ),
            new_coupon_code=loyalty.code,
        )

    async def wait_for_notifications(self) -> None:
        """Block until every background coupon email has finished."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications))

    # --- Steps ----------------------------------------------------------------

    async def _place_order(
        self,
        buyer_id: str,
        priced: PricedCart,
        billing_address: BillingAddress,
        payment_method: PaymentMethod,
        coupon_code: str | None,
    ) -> tuple[Order, PaymentSession, Coupon]:
        now = self._clock()
        session: PaymentSession | None = None
        try:
            async with self._uow_factory() as uow:
                discount = Money.zero(self._config.currency)
                if coupon_code is not None:
                    check = CouponValidator(uow.coupons).validate(
                        coupon_code, priced.subtotal, buyer_id, now
                    )
                    if not check.ok:
                        logger.warning(
                            "Coupon %s rejected for buyer %s: %s",
                            coupon_code, buyer_id, check.reason.message,
                        )
                        raise InvalidCouponError(coupon_code, check.reason)
                    check.coupon.redeem(buyer_id, now)
                    uow.coupons.save(check.coupon)
                    discount = check.discount

                totals = self._calculator.compute(priced.items, discount, self._config.tax_rate)
                order = Order.create(
                    buyer_id=buyer_id,
                    items=priced.items,
                    billing_address=billing_address,
                    totals=totals,
                    payment_method=payment_method,
                    applied_coupon_code=coupon_code,
                )
                uow.orders.save(order)

                try:
                    session = await self._open_payment_session(order)
                except PaymentGatewayError:
                    logger.warning("Rolling back order %s: payment session failed", order.id)
                    raise
                order.attach_payment_reference(session.reference)
                uow.orders.save(order)

                loyalty = self._issue_loyalty_coupon(uow, buyer_id, now)
                uow.coupons.save(loyalty)
        except ConcurrencyConflict:
            if session is not None:
                logger.warning(
                    "Payment session %s dropped after a commit conflict; "
                    "it was never attached to a saved order",
                    session.reference,
                )
            raise

        return order, session, loyalty

    async def _open_payment_session(self, order: Order) -> PaymentSession:
        timeout = self._config.gateway_timeout
        try:
            return await asyncio.wait_for(
                self._gateway.create_session(
                    amount=order.total_amount,
                    email=order.billing_address.email,
                    order_id=order.id,
                    metadata={"userId": order.buyer_id},
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Payment gateway timed out after %ss for order %s", timeout, order.id)
            raise PaymentGatewayError(
                f"Payment gateway did not respond within {timeout} seconds"
            ) from exc

    def _issue_loyalty_coupon(self, uow: UnitOfWork, buyer_id: str, now: datetime) -> Coupon:
        policy = self._config.loyalty
        for _ in range(_LOYALTY_CODE_ATTEMPTS):
            code = generate_loyalty_code()
            if uow.coupons.get_by_code(code) is None:
                break
        else:
            raise PersistenceError("Could not generate a unique loyalty coupon code")
        return Coupon.loyalty(
            user_id=buyer_id,
            percent=policy.percent,
            valid_for=policy.valid_for,
            min_order_amount=Money(policy.min_order_amount, self._config.currency),
            now=now,
            code=code,
        )

    # --- Notification ---------------------------------------------------------

    def _notify_in_background(self, order: Order, coupon: Coupon) -> None:
        task = asyncio.create_task(self._send_coupon_email(order, coupon))
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _send_coupon_email(self, order: Order, coupon: Coupon) -> None:
        try:
            await self._notifier.send_coupon_email(
                to_email=order.billing_address.email,
                coupon_code=coupon.code,
                value=coupon.value,
                kind=coupon.kind,
                expires_at=coupon.expires_at,
                context=CouponEmailContext(
                    order_id=order.id,
                    product_names=", ".join(order.product_names),
                    total_amount=order.total_amount,
                ),
            )
        except Exception:
            logger.exception("Error sending generated coupon email for order %s", order.id)
