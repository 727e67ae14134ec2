"""
Payment provider gateway.

Creates charge intents through the Stripe REST API. Only the contract
this service needs is covered: create an intent, hand its client secret
to the browser. Provider calls are bounded by ``payment_timeout_seconds``
and guarded by a circuit breaker.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from courier.app.core.config import settings
from courier.app.core.exceptions import DependencyUnavailableError, ValidationError
from courier.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger("courier.payments")

# Provider statuses that count against the circuit breaker besides 5xx
TRANSIENT_OR_AUTH_CODES = frozenset({401, 403, 429})


@dataclass(frozen=True)
class ChargeIntent:
    intent_id: str
    client_secret: str
    amount: int
    currency: str


class PaymentProviderError(Exception):
    """Provider answered with a non-success status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class StripePaymentGateway:
    """
    Thin async client for ``POST /v1/payment_intents``.

    ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        secret_key: str = None,
        api_base: str = None,
        currency: str = None,
        timeout: float = None,
        breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.stripe_secret_key
        self.api_base = (api_base or settings.stripe_api_base).rstrip("/")
        self.currency = currency or settings.payment_currency
        self.timeout = timeout or settings.payment_timeout_seconds
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=settings.payment_circuit_failure_threshold,
            reset_timeout=settings.payment_circuit_reset_seconds,
        )
        self.transport = transport

    async def create_intent(self, amount_in_cents: int) -> ChargeIntent:
        """
        Create a card payment intent for ``amount_in_cents``.

        Raises:
            ValidationError: provider rejected the request (4xx other than auth/rate limit)
            DependencyUnavailableError: timeout, network error, provider 5xx or open circuit
        """
        try:
            response = await self.breaker.call(self._post_intent, amount_in_cents)
        except CircuitOpenError as exc:
            logger.error("Payment circuit open, rejecting intent for %s", amount_in_cents)
            raise DependencyUnavailableError("payment provider", "Payment provider temporarily unavailable") from exc
        except PaymentProviderError as exc:
            logger.error("Payment provider error %s: %s", exc.status_code, exc.message)
            raise DependencyUnavailableError("payment provider") from exc
        except httpx.TimeoutException as exc:
            logger.error("Payment provider timed out after %ss", self.timeout)
            raise DependencyUnavailableError("payment provider", "Payment provider timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("Payment provider unreachable: %s", exc)
            raise DependencyUnavailableError("payment provider") from exc

        if response.status_code >= 400:
            # Rejected request (bad amount, currency, ...); not a provider outage
            raise ValidationError(_error_message(response))

        payload = response.json()
        logger.info("Created payment intent %s for %s %s", payload["id"], amount_in_cents, self.currency)
        return ChargeIntent(
            intent_id=payload["id"],
            client_secret=payload["client_secret"],
            amount=payload.get("amount", amount_in_cents),
            currency=payload.get("currency", self.currency),
        )

    async def _post_intent(self, amount_in_cents: int) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.api_base,
            auth=(self.secret_key, ""),
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            response = await client.post(
                "/v1/payment_intents",
                data={
                    "amount": str(amount_in_cents),
                    "currency": self.currency,
                    "payment_method_types[]": "card",
                },
            )
        if response.status_code >= 500 or response.status_code in TRANSIENT_OR_AUTH_CODES:
            raise PaymentProviderError(response.status_code, _error_message(response))
        return response


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text or f"HTTP {response.status_code}"


_default_gateway: Optional[StripePaymentGateway] = None


def get_payment_gateway() -> StripePaymentGateway:
    """
    FastAPI dependency returning the process-wide gateway.

    One instance keeps the circuit breaker state across requests.
    """
    global _default_gateway
    if _default_gateway is None:
        _default_gateway = StripePaymentGateway()
    return _default_gateway
