"""
Payment providers -- the external charge step of a premium upgrade.

Every provider resolves to a PaymentOutcome; failures are reported in the
outcome, never raised. Charges are never retried automatically.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from appvault.config import Settings
from appvault.schemas.payment import PaymentOutcome

logger = logging.getLogger(__name__)

_SUCCESS_STATUSES = {"captured", "paid", "succeeded"}


class PaymentProvider(ABC):
    """Charge an amount (whole currency units) and report the outcome."""

    @abstractmethod
    async def charge(self, amount: int, currency: str, description: str) -> PaymentOutcome:
        ...


class DemoPaymentProvider(PaymentProvider):
    """Simulated gateway used when no real gateway is configured."""

    async def charge(self, amount: int, currency: str, description: str) -> PaymentOutcome:
        transaction_id = f"demo_{int(time.time() * 1000)}"
        logger.info("Demo payment accepted: %s %s (%s)", amount, currency, transaction_id)
        return PaymentOutcome.succeeded(transaction_id, amount, currency)


class HttpPaymentProvider(PaymentProvider):
    """
    JSON-over-HTTP charge endpoint.

    Request:  POST {api_url} {"amount": <minor units>, "currency", "description"}
    Response: {"id": "...", "status": "captured" | "failed", "error": {"description": "..."}}
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    async def charge(self, amount: int, currency: str, description: str) -> PaymentOutcome:
        payload = {
            "amount": int(amount) * 100,  # minor units (paise)
            "currency": currency,
            "description": description,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self._client is not None:
                resp = await self._client.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(self.api_url, json=payload, headers=headers)
            data = resp.json() if resp.content else {}
        except Exception as exc:
            logger.warning("Payment request failed: %s", exc)
            return PaymentOutcome.failed(f"Payment gateway unreachable: {exc}", amount, currency)

        status = str(data.get("status", "")).lower()
        transaction_id = data.get("id")
        if resp.is_success and status in _SUCCESS_STATUSES and transaction_id:
            return PaymentOutcome.succeeded(str(transaction_id), amount, currency)

        error = data.get("error") or {}
        reason = (
            error.get("description")
            if isinstance(error, dict) and error.get("description")
            else f"Payment not completed (HTTP {resp.status_code}, status={status or 'unknown'})"
        )
        logger.warning("Payment declined: %s", reason)
        return PaymentOutcome.failed(reason, amount, currency)


def build_payment_provider(settings: Settings) -> PaymentProvider:
    """HTTP gateway when configured, demo mode otherwise."""
    if settings.payment_api_url and settings.payment_api_key:
        return HttpPaymentProvider(
            settings.payment_api_url,
            settings.payment_api_key,
            timeout=settings.payment_timeout_seconds,
        )
    logger.warning("Payment gateway not configured; using demo payments")
    return DemoPaymentProvider()
