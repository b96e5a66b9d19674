"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from marketplace.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from marketplace.domain.model.value_objects import BillingAddress, Money, Quantity
from marketplace.domain.repository.order_repository import OrderRepository
from marketplace.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_reference(self, reference: str) -> Order | None:
        for raw in self._file.load():
            if raw.get("transaction_reference") == reference:
                return self._to_domain(raw)
        return None

    def list_for_buyer(self, buyer_id: str) -> list[Order]:
        orders = [
            self._to_domain(raw) for raw in self._file.load() if raw["buyer_id"] == buyer_id
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def save(self, order: Order) -> None:
        self.save_all([order])

    def save_all(self, orders: list[Order]) -> None:
        """Upsert several orders with a single file write."""
        raw_orders = self._file.load()
        index = {raw["id"]: i for i, raw in enumerate(raw_orders)}
        for order in orders:
            if order.id in index:
                raw_orders[index[order.id]] = self._to_raw(order)
            else:
                index[order.id] = len(raw_orders)
                raw_orders.append(self._to_raw(order))
        self._file.persist(raw_orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        currency = order.total_amount.currency
        return {
            "id": order.id,
            "buyer_id": order.buyer_id,
            "currency": currency,
            "billing_address": {
                "first_name": order.billing_address.first_name,
                "last_name": order.billing_address.last_name,
                "email": order.billing_address.email,
                "phone": order.billing_address.phone,
            },
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "vendor_id": item.vendor_id,
                    "vendor_name": item.vendor_name,
                    "variant_id": item.variant_id,
                    "variant_name": item.variant_name,
                    "variant_duration": item.variant_duration,
                    "quantity": item.quantity.value,
                    "price_at_purchase": str(item.price_at_purchase.amount),
                }
                for item in order.items
            ],
            "subtotal": str(order.subtotal.amount),
            "discount_amount": str(order.discount_amount.amount),
            "tax_amount": str(order.tax_amount.amount),
            "total_amount": str(order.total_amount.amount),
            "payment_method": order.payment_method.value,
            "payment_status": order.payment_status.value,
            "order_status": order.order_status.value,
            "applied_coupon_code": order.applied_coupon_code,
            "transaction_reference": order.transaction_reference,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw["currency"]

        def money(value: str) -> Money:
            return Money(Decimal(value), currency)

        items = [
            OrderLineItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                vendor_id=i["vendor_id"],
                vendor_name=i["vendor_name"],
                variant_id=i["variant_id"],
                variant_name=i["variant_name"],
                variant_duration=i.get("variant_duration"),
                quantity=Quantity(i["quantity"]),
                price_at_purchase=money(i["price_at_purchase"]),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            buyer_id=raw["buyer_id"],
            items=items,
            billing_address=BillingAddress(**raw["billing_address"]),
            subtotal=money(raw["subtotal"]),
            discount_amount=money(raw["discount_amount"]),
            tax_amount=money(raw["tax_amount"]),
            total_amount=money(raw["total_amount"]),
            payment_method=PaymentMethod(raw["payment_method"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            order_status=OrderStatus(raw["order_status"]),
            applied_coupon_code=raw.get("applied_coupon_code"),
            transaction_reference=raw.get("transaction_reference"),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
