"""
Parcel Delivery Backend — Document Tables
===========================================

What:  ORM models for the five collections: users, riders, parcels, payments,
       tracking.
How:   Each row renders as a JSON document through `to_document()`, keyed by a
       24-hex-digit `_id`. Fields the API filters or sorts on are real columns;
       users, riders and parcels are open-schema, so any other client-supplied
       fields are kept in the JSON `extra` column and merged back on read.
Who:   Used by the services for CRUD and by Alembic for schema management.

Document ↔ column names:
    Most fields keep their column name. Payments expose the camelCase keys the
    checkout client posts (parcelId, paymentMethod, transactionId).
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Tuple

from sqlalchemy import JSON, DateTime, Float, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from parcel_api.database import Base, new_object_id

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
DocumentJSON = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentMixin:
    """
    Shared `_id` column and document rendering.

    Subclasses list their exposed fields in FIELDS as
    (document key, attribute name) pairs.
    """

    FIELDS: ClassVar[Tuple[Tuple[str, str], ...]] = ()

    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=new_object_id,
        comment="24-hex-digit document id (timestamp prefix + random suffix)",
    )

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"_id": self.id}
        extra = getattr(self, "extra", None)
        if extra:
            doc.update(extra)
        for key, attr in self.FIELDS:
            doc[key] = getattr(self, attr)
        return doc

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id})>"


class User(DocumentMixin, Base):
    """
    A registered account.

    Lifecycle:
        Created by the first POST /users for an email; later logins only
        refresh last_log_in. role moves between user/admin via
        PATCH /users/{id}/role, and to "rider" when a rider application
        for the same email is accepted.
    """

    __tablename__ = "users"

    FIELDS = (
        ("email", "email"),
        ("role", "role"),
        ("created_at", "created_at"),
        ("last_log_in", "last_log_in"),
    )

    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    # ISO-8601 string, as the dashboard displays it verbatim
    last_log_in: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    extra: Mapped[Dict[str, Any]] = mapped_column(DocumentJSON, nullable=False, default=dict)


class Rider(DocumentMixin, Base):
    """A delivery-agent application; status: pending → accepted | rejected | ..."""

    __tablename__ = "riders"

    FIELDS = (
        ("name", "name"),
        ("email", "email"),
        ("status", "status"),
        ("created_at", "created_at"),
    )

    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    extra: Mapped[Dict[str, Any]] = mapped_column(DocumentJSON, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_riders_status_created_at", "status", "created_at"),
    )


class Parcel(DocumentMixin, Base):
    """
    A shipment booked by a user.

    payment_status only ever moves unpaid → paid (PaymentService.record_payment).
    """

    __tablename__ = "parcels"

    FIELDS = (
        ("tracking_id", "tracking_id"),
        ("created_by", "created_by"),
        ("creation_date", "creation_date"),
        ("payment_status", "payment_status"),
        ("delivery_status", "delivery_status"),
    )

    tracking_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, index=True)
    creation_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="unpaid")
    delivery_status: Mapped[str] = mapped_column(
        String(30), nullable=False, default="not_collected"
    )
    extra: Mapped[Dict[str, Any]] = mapped_column(DocumentJSON, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_parcels_creation_date", "creation_date"),
    )


class Payment(DocumentMixin, Base):
    """Append-only payment record; never updated after insert."""

    __tablename__ = "payments"

    FIELDS = (
        ("parcelId", "parcel_id"),
        ("email", "email"),
        ("amount", "amount"),
        ("paymentMethod", "payment_method"),
        ("transactionId", "transaction_id"),
        ("paid_at_string", "paid_at_string"),
        ("paid_at", "paid_at"),
    )

    parcel_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    paid_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    paid_at_string: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        Index("idx_payments_email_paid_at", "email", "paid_at"),
    )


class TrackingLog(DocumentMixin, Base):
    """Append-only parcel status event."""

    __tablename__ = "tracking"

    FIELDS = (
        ("tracking_id", "tracking_id"),
        ("parcel_id", "parcel_id"),
        ("status", "status"),
        ("message", "message"),
        ("time", "time"),
        ("updated_by", "updated_by"),
    )

    tracking_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    parcel_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_by: Mapped[str] = mapped_column(String(320), nullable=False, default="")
