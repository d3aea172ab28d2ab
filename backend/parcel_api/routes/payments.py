"""
Parcel Delivery Backend — Payment Route Handlers
==================================================

What:  Payment history, payment recording, and Stripe payment intents.

Authorization (GET /payments):
    The caller must present a valid bearer token AND ask for their own email.
    The guard raises before the history query runs, so a mismatch ends the
    request with a single 403 response.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.auth import ensure_same_identity, get_current_user
from parcel_api.database import get_db_session
from parcel_api.schemas.common import ErrorResponse
from parcel_api.schemas.payments import (
    PaymentCreate,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentRecordedResponse,
)
from parcel_api.services.auth_base import AuthenticatedUser
from parcel_api.services.payment_base import PaymentGateway
from parcel_api.services.payment_service import payment_service

router = APIRouter(tags=["Payments"])


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


@router.get(
    "/payments",
    responses={
        401: {"description": "No bearer token", "model": ErrorResponse},
        403: {"description": "Invalid token or not your email", "model": ErrorResponse},
    },
    summary="Payment history of the signed-in user, latest first",
)
async def list_payments(
    email: Optional[str] = Query(default=None, description="Must equal the token's email"),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    ensure_same_identity(user, email)
    return await payment_service.list_payments(db, email)


@router.post(
    "/payments",
    status_code=status.HTTP_201_CREATED,
    response_model=PaymentRecordedResponse,
    responses={
        400: {"description": "Missing fields or invalid parcelId", "model": ErrorResponse},
        404: {"description": "Parcel not found or already paid", "model": ErrorResponse},
    },
    summary="Record a payment and mark its parcel as paid",
)
async def record_payment(
    body: PaymentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PaymentRecordedResponse:
    return await payment_service.record_payment(db, body)


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    responses={500: {"description": "Payment provider error", "model": ErrorResponse}},
    summary="Create a card payment intent and return its client secret",
)
async def create_payment_intent(
    body: PaymentIntentRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> PaymentIntentResponse:
    client_secret = await gateway.create_intent(body.amount_in_cents)
    return PaymentIntentResponse(clientSecret=client_secret)
