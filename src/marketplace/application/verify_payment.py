"""Application service: Verify Payment use case.

Called when the gateway redirects the buyer back (or on a webhook).  The
gateway is the source of truth: the order moves out of ``pending`` only
on what ``PaymentGateway.verify`` reports.
"""

from __future__ import annotations

import logging
from typing import Callable

from marketplace.application.dto import OrderDTO
from marketplace.application.ports import PaymentGateway
from marketplace.domain.exceptions import EntityNotFoundError
from marketplace.domain.model.order import Order
from marketplace.domain.repository.order_repository import OrderRepository
from marketplace.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class VerifyPaymentHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        payment_gateway: PaymentGateway,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway = payment_gateway

    async def handle(self, reference: str) -> OrderDTO:
        verification = await self._gateway.verify(reference)

        async with self._uow_factory() as uow:
            order = self._find_order(uow.orders, reference, verification.metadata)

            if not order.is_payment_pending:
                logger.info(
                    "Order %s already %s; ignoring verification of %s",
                    order.id, order.payment_status.value, reference,
                )
                return OrderDTO.from_order(order)

            if verification.succeeded:
                order.mark_paid()
                logger.info("Payment %s confirmed for order %s", reference, order.id)
            else:
                order.mark_payment_failed()
                logger.warning(
                    "Payment %s for order %s reported %s",
                    reference, order.id, verification.status,
                )
            uow.orders.save(order)

        return OrderDTO.from_order(order)

    @staticmethod
    def _find_order(orders: OrderRepository, reference: str, metadata: dict) -> Order:
        order = orders.get_by_reference(reference)
        if order is None and isinstance(metadata, dict) and metadata.get("orderId"):
            order = orders.get_by_id(str(metadata["orderId"]))
        if order is None:
            raise EntityNotFoundError(f"No order found for payment reference {reference}")
        return order
