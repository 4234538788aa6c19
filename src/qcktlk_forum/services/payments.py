"""Client for the external payment processor (Stripe-compatible REST API).

Only payment-intent creation happens server side. The client confirms the
intent with the processor and then reports the outcome to the payments
endpoint, which hands it to settlement.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from qcktlk_forum.core.settings import Settings, settings

logger = logging.getLogger(__name__)

HTTP_OK = 200
PAYMENT_INTENTS_PATH = "/v1/payment_intents"


class PaymentProcessorError(RuntimeError):
    """Raised when the payment processor rejects or fails a request."""


class PaymentProcessorDisabledError(PaymentProcessorError):
    """Raised when no processor key is configured."""


@dataclass(frozen=True)
class PaymentIntentHandle:
    """Subset of a payment intent the client needs to complete checkout."""

    id: str
    client_secret: str
    amount: int
    currency: str
    status: str


def _encode_form(
    amount: int,
    currency: str,
    metadata: Mapping[str, str] | None,
) -> dict[str, str]:
    form = {
        "amount": str(amount),
        "currency": currency,
        "payment_method_types[]": "card",
    }
    for key, value in (metadata or {}).items():
        form[f"metadata[{key}]"] = str(value)
    return form


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"HTTP {response.status_code}"


class PaymentProcessorClient:
    """Thin async wrapper around the processor's payment-intent API."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        currency: str = "usd",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, config: Settings) -> PaymentProcessorClient:
        return cls(
            api_key=config.payment_gateway_key,
            base_url=config.payment_api_base_url,
            currency=config.payment_currency,
            timeout_seconds=config.payment_http_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.api_key or "", ""),
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def create_payment_intent(
        self,
        amount: int,
        *,
        currency: str | None = None,
        metadata: Mapping[str, str] | None = None,
        idempotency_key: str | None = None,
    ) -> PaymentIntentHandle:
        """Create a payment intent and return its client handle.

        Raises:
            PaymentProcessorDisabledError: If no processor key is configured.
            PaymentProcessorError: On network failures or non-200 responses.
        """
        if not self.enabled:
            raise PaymentProcessorDisabledError("Payment processor is not configured")
        if amount <= 0:
            raise PaymentProcessorError("Amount must be positive")

        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        try:
            response = await self._get_client().post(
                PAYMENT_INTENTS_PATH,
                data=_encode_form(amount, currency or self.currency, metadata),
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Payment processor request failed: %s", exc)
            raise PaymentProcessorError("Payment processor is unreachable") from exc

        if response.status_code != HTTP_OK:
            message = _error_message(response)
            logger.warning(
                "Payment processor rejected intent creation (%d): %s",
                response.status_code,
                message,
            )
            raise PaymentProcessorError(message)

        body = response.json()
        try:
            handle = PaymentIntentHandle(
                id=body["id"],
                client_secret=body["client_secret"],
                amount=int(body.get("amount", amount)),
                currency=str(body.get("currency", currency or self.currency)),
                status=str(body.get("status", "requires_payment_method")),
            )
        except (KeyError, TypeError) as exc:
            raise PaymentProcessorError("Malformed payment intent response") from exc

        logger.info("Created payment intent %s for %d %s", handle.id, handle.amount, handle.currency)
        return handle

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


_payment_client: PaymentProcessorClient | None = None


def get_payment_client() -> PaymentProcessorClient:
    """Return the shared payment processor client."""
    global _payment_client
    if _payment_client is None:
        _payment_client = PaymentProcessorClient.from_settings(settings)
    return _payment_client
