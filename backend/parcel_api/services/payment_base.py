"""
Parcel Delivery Backend — Abstract Payment Gateway Interface
==============================================================

What:  Contract for the external payment provider.
Who:   Called by POST /create-payment-intent; the concrete gateway lives on
       app.state.payment_gateway.

Implementations:
    - StripePaymentGateway: Stripe PaymentIntents (default)
"""

from abc import ABC, abstractmethod


class PaymentGateway(ABC):
    """
    Contract:
        - create_intent() reserves a card payment of `amount` minor units
        - Returns the client secret the browser uses to confirm the payment
        - Raises PaymentGatewayError carrying the provider's message on failure
        - Raises ConfigurationError when no provider key is configured
    """

    @abstractmethod
    async def create_intent(self, amount: int) -> str:
        ...
