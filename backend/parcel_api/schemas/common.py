"""
Parcel Delivery Backend — Shared Response Schemas
===================================================

What:  Error, health and write-acknowledgement models used by every route.
"""

from typing import Any, ClassVar, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field


class OpenDocument(BaseModel):
    """
    Base for open-schema request bodies (users, riders, parcels).

    Unknown fields are accepted and stored alongside the known ones.
    """

    model_config = ConfigDict(extra="allow")

    # Never taken from the client: ids are generated server-side
    RESERVED_KEYS: ClassVar[FrozenSet[str]] = frozenset({"_id", "id"})

    def extra_fields(self, *exclude: str) -> Dict[str, Any]:
        """Client-supplied fields that have no column of their own."""
        skip = self.RESERVED_KEYS.union(exclude)
        return {k: v for k, v in (self.model_extra or {}).items() if k not in skip}


class InsertResponse(BaseModel):
    """Acknowledgement for a single-document insert."""
    acknowledged: bool = Field(default=True)
    insertedId: str = Field(description="Id of the new document")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "parcel with ID '65f...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
