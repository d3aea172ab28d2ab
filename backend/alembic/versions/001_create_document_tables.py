"""Create document tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, riders, parcels, payments and tracking.
How:   Ids are 24-character hex strings generated by the application.
       Open-schema collections (users, riders, parcels) keep unmodelled
       fields in a JSONB `extra` column.

Rollback: downgrade() drops all five tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        sa.String(24),
        nullable=False,
        comment="24-hex-digit document id (timestamp prefix + random suffix)",
    )


def _extra_column() -> sa.Column:
    return sa.Column(
        "extra",
        postgresql.JSONB(),
        nullable=False,
        server_default=sa.text("'{}'::jsonb"),
        comment="Client-supplied fields without a dedicated column",
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'"),
                  comment="user | admin | rider"),
        _timestamp("created_at"),
        sa.Column("last_log_in", sa.String(40), nullable=True,
                  comment="ISO-8601 time of the latest sign-in"),
        _extra_column(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # ── riders ────────────────────────────────────────────────────────────
    op.create_table(
        "riders",
        _id_column(),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default=sa.text("'pending'")),
        _timestamp("created_at"),
        _extra_column(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_riders_email", "riders", ["email"])
    # Serves GET /riders/pending and /riders/active (filter + newest first)
    op.create_index("idx_riders_status_created_at", "riders", ["status", "created_at"])

    # ── parcels ───────────────────────────────────────────────────────────
    op.create_table(
        "parcels",
        _id_column(),
        sa.Column("tracking_id", sa.String(64), nullable=True),
        sa.Column("created_by", sa.String(320), nullable=True),
        _timestamp("creation_date"),
        sa.Column("payment_status", sa.String(20), nullable=False,
                  server_default=sa.text("'unpaid'"), comment="unpaid | paid"),
        sa.Column("delivery_status", sa.String(30), nullable=False,
                  server_default=sa.text("'not_collected'")),
        _extra_column(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_parcels_tracking_id", "parcels", ["tracking_id"])
    op.create_index("ix_parcels_created_by", "parcels", ["created_by"])
    op.create_index("idx_parcels_creation_date", "parcels", ["creation_date"])

    # ── payments ──────────────────────────────────────────────────────────
    op.create_table(
        "payments",
        _id_column(),
        sa.Column("parcel_id", sa.String(24), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        _timestamp("paid_at"),
        sa.Column("paid_at_string", sa.String(40), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_parcel_id", "payments", ["parcel_id"])
    op.create_index("ix_payments_email", "payments", ["email"])
    op.create_index("idx_payments_email_paid_at", "payments", ["email", "paid_at"])

    # ── tracking ──────────────────────────────────────────────────────────
    op.create_table(
        "tracking",
        _id_column(),
        sa.Column("tracking_id", sa.String(64), nullable=False),
        sa.Column("parcel_id", sa.String(24), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        _timestamp("time"),
        sa.Column("updated_by", sa.String(320), nullable=False, server_default=sa.text("''")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tracking_tracking_id", "tracking", ["tracking_id"])
    op.create_index("ix_tracking_parcel_id", "tracking", ["parcel_id"])


def downgrade() -> None:
    """Drop all document tables. All data is lost."""
    for table in ("tracking", "payments", "parcels", "riders", "users"):
        op.drop_table(table)
