"""
Parcel Delivery Backend — Tracking Route Handlers
===================================================

What:  Append a tracking event; read a tracking id's history.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import get_db_session
from parcel_api.schemas.common import ErrorResponse
from parcel_api.schemas.tracking import TrackingCreate, TrackingCreateResponse
from parcel_api.services.tracking_service import tracking_service

router = APIRouter(prefix="/tracking", tags=["Tracking"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=TrackingCreateResponse,
    responses={400: {"description": "Missing fields or invalid parcel_id", "model": ErrorResponse}},
    summary="Add a tracking log entry",
)
async def add_tracking_log(
    body: TrackingCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TrackingCreateResponse:
    return await tracking_service.add_log(db, body)


@router.get("/{tracking_id}", summary="Tracking history, oldest event first")
async def get_tracking_history(
    tracking_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await tracking_service.history(db, tracking_id)
