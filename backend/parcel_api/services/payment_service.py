"""
Parcel Delivery Backend — Payment Service (Payment Recorder)
==============================================================

What:  Records completed payments and serves payment history.
Who:   Called by routes/payments.py.

Recording Flow (POST /payments):
    ┌────────────────────┐    ┌───────────────────────┐    ┌──────────────┐
    │ Validate parcelId  │───▶│ UPDATE parcels        │───▶│ INSERT       │
    │ (400 if malformed) │    │ SET payment_status=   │    │ payments     │
    └────────────────────┘    │ 'paid' WHERE unpaid   │    │ (+timestamp) │
                              └───────────────────────┘    └──────────────┘
                                        │ 0 rows
                                        ▼
                              404 "Parcel not found or already paid!"

    The update only matches parcels that are not yet paid, so a repeated
    submission for the same parcel is refused and never creates a second
    payment record. Both statements run in the request's transaction.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import desc, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import commit_or_raise, parse_object_id
from parcel_api.exceptions import DatabaseError, NotFoundError
from parcel_api.models.documents import Parcel, Payment
from parcel_api.schemas.payments import PaymentCreate, PaymentRecordedResponse

logger = logging.getLogger(__name__)

PAID = "paid"


class PaymentService:
    """Business logic for the payments collection."""

    async def record_payment(self, db: AsyncSession, payload: PaymentCreate) -> PaymentRecordedResponse:
        parcel_id = parse_object_id(payload.parcel_id, "parcel")

        # ── Step 1: flip the parcel to paid ───────────────────────────────
        try:
            result = await db.execute(
                update(Parcel)
                .where(Parcel.id == parcel_id)
                .where(or_(Parcel.payment_status.is_(None), Parcel.payment_status != PAID))
                .values(payment_status=PAID)
            )
        except SQLAlchemyError as e:
            logger.error("Payment error (parcel update) for %s: %s", parcel_id, str(e))
            raise DatabaseError(context={"operation": "record_payment", "step": "parcel_update"})

        if result.rowcount == 0:
            raise NotFoundError(
                resource="parcel",
                resource_id=parcel_id,
                message="Parcel not found or already paid!",
            )

        # ── Step 2: append the payment record ─────────────────────────────
        paid_at = datetime.now(timezone.utc)
        payment = Payment(
            parcel_id=parcel_id,
            email=payload.email,
            amount=payload.amount,
            payment_method=payload.payment_method,
            transaction_id=payload.transaction_id,
            paid_at=paid_at,
            paid_at_string=paid_at.isoformat(),
        )
        try:
            db.add(payment)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Payment error (insert) for %s: %s", parcel_id, str(e))
            raise DatabaseError(context={"operation": "record_payment", "step": "payment_insert"})

        await commit_or_raise(db, "record_payment")

        logger.info(
            "Payment %s recorded for parcel %s (amount=%s, method=%s)",
            payment.id,
            parcel_id,
            payload.amount,
            payload.payment_method or "unknown",
        )
        return PaymentRecordedResponse(
            message="Payment recorded and parcel marked as paid!",
            insertedId=payment.id,
        )

    async def list_payments(self, db: AsyncSession, email: str) -> List[Dict[str, Any]]:
        """Payment history for `email` (any letter case), latest first."""
        try:
            result = await db.execute(
                select(Payment)
                .where(func.lower(Payment.email) == email.strip().lower())
                .order_by(desc(Payment.paid_at), desc(Payment.id))
            )
            return [payment.to_document() for payment in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Error fetching payment history: %s", str(e))
            raise DatabaseError(
                message="Failed to get payments",
                context={"operation": "list_payments"},
            )


payment_service = PaymentService()
