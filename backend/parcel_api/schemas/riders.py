"""
Parcel Delivery Backend — Rider Schemas
=========================================

What:  Request/response contracts for /riders.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from parcel_api.schemas.common import OpenDocument


class RiderCreate(OpenDocument):
    """
    Body of POST /riders (a rider application).

    Applications always start as "pending"; a client-supplied status is ignored.
    """
    name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    created_at: Optional[datetime] = Field(default=None)


class RiderStatusUpdate(BaseModel):
    """
    Body of PATCH /riders/{id}.

    `email` is only a cross-check: the user promoted on acceptance is the one
    whose email is stored on the rider application.
    """
    status: str = Field(min_length=1, max_length=30)
    email: Optional[str] = Field(default=None)


class RiderStatusResponse(BaseModel):
    acknowledged: bool = True
    matchedCount: int
    modifiedCount: int
    userRoleUpdated: bool = False


class RiderInsertResponse(BaseModel):
    insertedId: str
