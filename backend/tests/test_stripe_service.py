"""
Parcel Delivery Backend — Stripe Gateway Tests
================================================

What:  StripePaymentGateway with stripe.PaymentIntent.create mocked out.
"""

from unittest.mock import MagicMock, patch

import pytest
import stripe

from parcel_api.exceptions import ConfigurationError, PaymentGatewayError
from parcel_api.services.stripe_service import StripePaymentGateway


class TestStripePaymentGateway:

    @pytest.mark.asyncio
    async def test_creates_card_intent(self):
        gateway = StripePaymentGateway("sk_test_123", currency="USD")
        intent = MagicMock(id="pi_1", client_secret="pi_1_secret_xyz")

        with patch.object(stripe.PaymentIntent, "create", return_value=intent) as create:
            secret = await gateway.create_intent(2599)

        assert secret == "pi_1_secret_xyz"
        create.assert_called_once_with(
            api_key="sk_test_123",
            amount=2599,
            currency="usd",
            payment_method_types=["card"],
        )

    @pytest.mark.asyncio
    async def test_provider_error_keeps_message(self):
        gateway = StripePaymentGateway("sk_test_123")
        error = stripe.InvalidRequestError("Amount must be at least $0.50 usd", param="amount")

        with patch.object(stripe.PaymentIntent, "create", side_effect=error):
            with pytest.raises(PaymentGatewayError) as exc_info:
                await gateway.create_intent(10)

        assert "Amount must be at least $0.50 usd" in exc_info.value.message
        assert exc_info.value.context["error_type"] == "InvalidRequestError"

    @pytest.mark.asyncio
    async def test_missing_key(self):
        gateway = StripePaymentGateway("")

        with patch.object(stripe.PaymentIntent, "create") as create:
            with pytest.raises(ConfigurationError):
                await gateway.create_intent(1000)

        create.assert_not_called()
