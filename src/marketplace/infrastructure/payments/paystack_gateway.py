"""Paystack implementation of the PaymentGateway port.

``requests`` is blocking, so every call runs in a worker thread via
``asyncio.to_thread``; the event loop stays free for other checkouts.
Every failure surfaces as ``PaymentGatewayError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from marketplace.application.ports import PaymentGateway, PaymentSession, PaymentVerification
from marketplace.domain.exceptions import PaymentGatewayError
from marketplace.domain.model.value_objects import Money

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.paystack.co"


class PaystackGateway(PaymentGateway):

    def __init__(
        self,
        secret_key: str,
        callback_url: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._callback_url = callback_url
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            }
        )

    # --- PaymentGateway interface ---------------------------------------------

    async def create_session(
        self,
        amount: Money,
        email: str,
        order_id: str,
        metadata: dict[str, Any],
    ) -> PaymentSession:
        payload = {
            "amount": amount.to_minor_units(),
            "currency": amount.currency,
            "email": email,
            "metadata": {**metadata, "orderId": order_id},
            "callback_url": self._callback_url,
        }
        data = await asyncio.to_thread(self._request, "POST", "/transaction/initialize", payload)
        try:
            return PaymentSession(
                reference=data["reference"],
                redirect_url=data["authorization_url"],
                raw=data,
            )
        except KeyError as exc:
            raise PaymentGatewayError(
                f"Paystack initialize response is missing {exc}"
            ) from exc

    async def verify(self, reference: str) -> PaymentVerification:
        data = await asyncio.to_thread(
            self._request, "GET", f"/transaction/verify/{reference}", None
        )
        status = "success" if data.get("status") == "success" else "failed"
        # Paystack echoes metadata back as sent, which may be a string or empty
        metadata = data.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        return PaymentVerification(status=status, metadata=metadata, raw=data)

    async def refund(self, reference: str, amount: Money | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"transaction": reference}
        if amount is not None:
            payload["amount"] = amount.to_minor_units()
        return await asyncio.to_thread(self._request, "POST", "/refund", payload)

    # --- HTTP -----------------------------------------------------------------

    def _request(self, method: str, path: str, payload: dict | None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, json=payload, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            logger.error("Paystack %s %s timed out", method, path)
            raise PaymentGatewayError("Payment gateway timed out") from exc
        except requests.exceptions.RequestException as exc:
            logger.error("Paystack %s %s failed: %s", method, path, exc)
            raise PaymentGatewayError(f"Payment gateway unreachable: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.status_code >= 400 or not body.get("status"):
            message = body.get("message") or response.text or f"HTTP {response.status_code}"
            logger.error(
                "Paystack %s %s rejected (HTTP %s): %s",
                method, path, response.status_code, message,
            )
            raise PaymentGatewayError(f"Payment gateway rejected the request: {message}")

        data = body.get("data") or {}
        if not isinstance(data, dict):
            logger.error("Paystack %s %s returned unexpected data: %r", method, path, data)
            raise PaymentGatewayError("Payment gateway returned an unexpected response")
        return data
