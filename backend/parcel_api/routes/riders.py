"""
Parcel Delivery Backend — Rider Route Handlers
================================================

What:  Rider applications: pending/active lists, apply, and status changes.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import get_db_session
from parcel_api.schemas.common import ErrorResponse
from parcel_api.schemas.riders import (
    RiderCreate,
    RiderInsertResponse,
    RiderStatusResponse,
    RiderStatusUpdate,
)
from parcel_api.services.rider_service import (
    STATUS_ACCEPTED,
    STATUS_PENDING,
    rider_service,
)

router = APIRouter(prefix="/riders", tags=["Riders"])


@router.get("/pending", summary="Rider applications awaiting review, newest first")
async def list_pending_riders(
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await rider_service.list_by_status(db, STATUS_PENDING)


@router.get("/active", summary="Accepted riders, newest first")
async def list_active_riders(
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await rider_service.list_by_status(db, STATUS_ACCEPTED)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=RiderInsertResponse,
    summary="Submit a rider application",
)
async def create_rider(
    body: RiderCreate,
    db: AsyncSession = Depends(get_db_session),
) -> RiderInsertResponse:
    rider_id = await rider_service.create_rider(db, body)
    return RiderInsertResponse(insertedId=rider_id)


@router.patch(
    "/{rider_id}",
    response_model=RiderStatusResponse,
    responses={
        400: {"description": "Invalid id or email mismatch", "model": ErrorResponse},
        404: {"description": "Rider not found", "model": ErrorResponse},
    },
    summary="Change a rider's status; accepting promotes the user to rider",
)
async def update_rider_status(
    rider_id: str,
    body: RiderStatusUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> RiderStatusResponse:
    return await rider_service.update_status(db, rider_id, body.status, body.email)
