"""
Parcel Delivery Backend — Stripe Payment Gateway
==================================================

What:  PaymentGateway implementation backed by Stripe PaymentIntents.
How:   Calls stripe.PaymentIntent.create with a per-call api_key (no global SDK
       state), in the configured currency, restricted to card payments. The SDK
       call is blocking, so it runs in Starlette's threadpool.
Who:   Built once in the application lifespan (app.state.payment_gateway).

Failure handling is pass-through: there are no retries, and any StripeError
becomes a PaymentGatewayError whose message is Stripe's own.
"""

import logging
import time

import stripe
from starlette.concurrency import run_in_threadpool

from parcel_api.exceptions import ConfigurationError, PaymentGatewayError
from parcel_api.services.payment_base import PaymentGateway

logger = logging.getLogger(__name__)


class StripePaymentGateway(PaymentGateway):
    """
    Args:
        api_key: Stripe secret key (empty string means "not configured")
        currency: ISO currency code for all intents
    """

    def __init__(self, api_key: str, currency: str = "usd"):
        self._api_key = api_key
        self.currency = currency.lower()

    async def create_intent(self, amount: int) -> str:
        if not self._api_key:
            raise ConfigurationError(
                message="Payments are not configured on this server",
                context={"missing": "PAYMENT_GATEWAY_KEY"},
            )

        start_time = time.perf_counter()
        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=self._api_key,
                amount=amount,
                currency=self.currency,
                payment_method_types=["card"],
            )
        except stripe.StripeError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            message = e.user_message or str(e) or "Payment provider request failed"
            logger.error(
                "Stripe PaymentIntent.create failed after %.0fms: %s (%s)",
                duration_ms,
                message,
                type(e).__name__,
            )
            raise PaymentGatewayError(
                message=message,
                context={"provider": "stripe", "error_type": type(e).__name__},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Stripe PaymentIntent %s created in %.0fms (amount=%d %s)",
            intent.id,
            duration_ms,
            amount,
            self.currency,
        )
        return intent.client_secret
