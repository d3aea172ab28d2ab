"""
Parcel Delivery Backend — Parcel Schemas
==========================================

What:  Request/response contracts for /parcels.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from parcel_api.schemas.common import OpenDocument


class ParcelCreate(OpenDocument):
    """
    Body of POST /parcels.

    Sender/receiver details, weight, cost, etc. are stored as sent.
    payment_status is owned by the server and always starts as "unpaid".
    """
    tracking_id: Optional[str] = Field(default=None, max_length=64)
    created_by: Optional[str] = Field(default=None, max_length=320)
    creation_date: Optional[datetime] = Field(default=None)
    delivery_status: Optional[str] = Field(default=None, max_length=30)


class DeleteResponse(BaseModel):
    message: str
    deletedCount: int
