"""
Parcel Delivery Backend — User Schemas
========================================

What:  Request/response contracts for /users.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from parcel_api.schemas.common import OpenDocument


class UserCreate(OpenDocument):
    """
    Body of POST /users, sent by the client after every sign-in.

    Any profile fields (name, photo, ...) are stored as-is. `role` is not
    accepted from the client; new accounts always start as "user".
    """
    email: str = Field(min_length=1, description="Account email")
    created_at: Optional[datetime] = Field(default=None)
    last_log_in: Optional[str] = Field(default=None, max_length=40)


class UserUpsertResponse(BaseModel):
    message: str
    inserted: bool
    insertedId: Optional[str] = None


class RoleUpdate(BaseModel):
    """Body of PATCH /users/{id}/role. Only "admin" and "user" are accepted."""
    role: Optional[str] = None


class RoleUpdateResponse(BaseModel):
    message: str
    modifiedCount: int
