"""
Parcel Delivery Backend — Tracking Schemas
============================================

What:  Request/response contracts for /tracking.
"""

from pydantic import BaseModel, Field


class TrackingCreate(BaseModel):
    """Body of POST /tracking. All fields except updated_by are required."""
    tracking_id: str = Field(min_length=1, max_length=64)
    parcel_id: str = Field(min_length=1)
    status: str = Field(min_length=1, max_length=50)
    message: str = Field(min_length=1)
    updated_by: str = Field(default="", max_length=320)


class TrackingCreateResponse(BaseModel):
    success: bool = True
    insertedId: str
    message: str = "Tracking log added successfully"
