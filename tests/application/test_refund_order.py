"""Integration tests for the RefundOrder use case."""

import asyncio
from decimal import Decimal

import pytest

from marketplace.application.refund_order import RefundOrderHandler
from marketplace.domain.exceptions import EntityNotFoundError, PaymentGatewayError, ValidationError
from marketplace.domain.model.order import PaymentStatus
from marketplace.domain.model.value_objects import Money
from tests.fakes import FakePaymentGateway, UnitOfWorkFactory, make_order


def _paid_order(reference="ref-1"):
    order = make_order(reference=reference)
    order.mark_paid()
    return order


def _setup(*orders, fail=False):
    factory = UnitOfWorkFactory()
    for order in orders:
        factory.orders.save(order)
    gateway = FakePaymentGateway(fail=fail)
    return RefundOrderHandler(uow_factory=factory, payment_gateway=gateway), factory, gateway


class TestRefundOrder:

    def test_full_refund(self):
        order = _paid_order()
        handler, factory, gateway = _setup(order)
        dto = asyncio.run(handler.handle(order.id))
        assert dto.payment_status == "refunded"
        assert dto.order_status == "refunded"
        assert gateway.refunds == [("ref-1", None)]
        assert factory.orders.get_by_id(order.id).payment_status == PaymentStatus.REFUNDED

    def test_partial_refund(self):
        order = _paid_order()
        handler, _, gateway = _setup(order)
        asyncio.run(handler.handle(order.id, Decimal("500")))
        assert gateway.refunds == [("ref-1", Money.of("500"))]

    def test_refund_above_total_rejected(self):
        order = _paid_order()
        handler, _, gateway = _setup(order)
        with pytest.raises(ValidationError, match="between 0 and"):
            asyncio.run(handler.handle(order.id, Decimal("5000")))
        assert gateway.refunds == []

    def test_zero_refund_rejected(self):
        order = _paid_order()
        handler, _, _ = _setup(order)
        with pytest.raises(ValidationError):
            asyncio.run(handler.handle(order.id, Decimal("0")))

    def test_nan_refund_rejected(self):
        order = _paid_order()
        handler, _, gateway = _setup(order)
        with pytest.raises(ValidationError, match="finite"):
            asyncio.run(handler.handle(order.id, Decimal("NaN")))
        assert gateway.refunds == []

    def test_pending_order_cannot_be_refunded(self):
        order = make_order()
        handler, _, gateway = _setup(order)
        with pytest.raises(ValidationError, match="payment status pending"):
            asyncio.run(handler.handle(order.id))
        assert gateway.refunds == []

    def test_unknown_order(self):
        handler, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            asyncio.run(handler.handle("missing"))

    def test_gateway_error_leaves_order_paid(self):
        order = _paid_order()
        handler, factory, _ = _setup(order, fail=True)
        with pytest.raises(PaymentGatewayError):
            asyncio.run(handler.handle(order.id))
        assert factory.orders.get_by_id(order.id).payment_status == PaymentStatus.COMPLETED
        assert factory.created[0].rolled_back
