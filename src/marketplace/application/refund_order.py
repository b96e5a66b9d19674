"""Application service: Refund Order use case."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable

from marketplace.application.dto import OrderDTO
from marketplace.application.ports import PaymentGateway
from marketplace.domain.exceptions import EntityNotFoundError, ValidationError
from marketplace.domain.model.order import PaymentStatus
from marketplace.domain.model.value_objects import Money
from marketplace.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class RefundOrderHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        payment_gateway: PaymentGateway,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway = payment_gateway

    async def handle(self, order_id: str, amount: Decimal | None = None) -> OrderDTO:
        """Refund a completed order, in full unless *amount* is given.

        The order is only marked refunded once the gateway accepted the
        refund; a gateway error leaves it untouched.
        """
        async with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")
            if order.payment_status != PaymentStatus.COMPLETED:
                raise ValidationError(
                    f"Cannot refund order with payment status {order.payment_status.value}"
                )
            if order.transaction_reference is None:
                raise ValidationError(f"Order {order_id} has no payment reference")

            refund_amount = None
            if amount is not None:
                refund_amount = Money(amount, order.total_amount.currency)
                if refund_amount > order.total_amount or refund_amount.is_zero:
                    raise ValidationError(
                        f"Refund amount must be between 0 and {order.total_amount}"
                    )

            await self._gateway.refund(order.transaction_reference, refund_amount)
            order.refund()
            uow.orders.save(order)

        logger.info("Order %s refunded (%s)", order.id, refund_amount or order.total_amount)
        return OrderDTO.from_order(order)
