"""
Parcel Delivery Backend — Payment Schemas
===========================================

What:  Request/response contracts for /payments and /create-payment-intent.
How:   The checkout client posts camelCase keys; fields are declared in
       snake_case with aliases, and either spelling is accepted.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentCreate(BaseModel):
    """Body of POST /payments, sent after the card payment succeeded client-side."""

    model_config = ConfigDict(populate_by_name=True)

    parcel_id: str = Field(alias="parcelId", min_length=1)
    email: str = Field(min_length=1)
    amount: float = Field(gt=0, description="Amount charged, in major currency units")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod", max_length=50)
    transaction_id: Optional[str] = Field(default=None, alias="transactionId", max_length=255)


class PaymentRecordedResponse(BaseModel):
    message: str
    insertedId: str


class PaymentIntentRequest(BaseModel):
    """Body of POST /create-payment-intent."""

    model_config = ConfigDict(populate_by_name=True)

    amount_in_cents: int = Field(
        alias="amountInCents",
        gt=0,
        description="Amount in minor currency units (e.g. cents)",
    )


class PaymentIntentResponse(BaseModel):
    clientSecret: str
