"""Integration tests for the VerifyPayment use case."""

import asyncio

import pytest

from marketplace.application.verify_payment import VerifyPaymentHandler
from marketplace.domain.exceptions import EntityNotFoundError
from marketplace.domain.model.order import OrderStatus, PaymentStatus
from tests.fakes import FakePaymentGateway, UnitOfWorkFactory, make_order


def _setup(verify_status="success", orders=()):
    factory = UnitOfWorkFactory()
    for order in orders:
        factory.orders.save(order)
    gateway = FakePaymentGateway(verify_status=verify_status)
    return VerifyPaymentHandler(uow_factory=factory, payment_gateway=gateway), factory, gateway


class TestVerifyPayment:

    def test_success_completes_order(self):
        order = make_order(reference="ref-1")
        handler, factory, _ = _setup(orders=[order])
        dto = asyncio.run(handler.handle("ref-1"))
        assert dto.payment_status == "completed"
        assert dto.order_status == "completed"
        stored = factory.orders.get_by_id(order.id)
        assert stored.payment_status == PaymentStatus.COMPLETED

    def test_failure_cancels_order(self):
        order = make_order(reference="ref-1")
        handler, factory, _ = _setup(verify_status="failed", orders=[order])
        dto = asyncio.run(handler.handle("ref-1"))
        assert dto.payment_status == "failed"
        assert factory.orders.get_by_id(order.id).order_status == OrderStatus.CANCELLED

    def test_abandoned_payment_is_a_failure(self):
        order = make_order(reference="ref-1")
        handler, _, _ = _setup(verify_status="abandoned", orders=[order])
        assert asyncio.run(handler.handle("ref-1")).payment_status == "failed"

    def test_falls_back_to_order_id_in_metadata(self):
        order = make_order(reference=None)
        handler, _, gateway = _setup(orders=[order])
        gateway.verify_metadata = {"orderId": order.id}
        dto = asyncio.run(handler.handle("unknown-ref"))
        assert dto.id == order.id
        assert dto.payment_status == "completed"

    def test_non_object_metadata_is_ignored(self):
        handler, _, gateway = _setup()
        gateway.verify_metadata = "order-1"
        with pytest.raises(EntityNotFoundError, match="unknown-ref"):
            asyncio.run(handler.handle("unknown-ref"))

    def test_unknown_reference(self):
        handler, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="unknown-ref"):
            asyncio.run(handler.handle("unknown-ref"))

    def test_second_verification_is_ignored(self):
        order = make_order(reference="ref-1")
        handler, factory, gateway = _setup(orders=[order])
        asyncio.run(handler.handle("ref-1"))
        gateway.verify_status = "failed"
        dto = asyncio.run(handler.handle("ref-1"))
        assert dto.payment_status == "completed"
        assert factory.orders.get_by_id(order.id).payment_status == PaymentStatus.COMPLETED
