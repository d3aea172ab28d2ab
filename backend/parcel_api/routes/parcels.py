"""
Parcel Delivery Backend — Parcel Route Handlers
=================================================

What:  List (authenticated), fetch, create and delete parcels.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.auth import get_current_user
from parcel_api.database import get_db_session
from parcel_api.schemas.common import ErrorResponse, InsertResponse
from parcel_api.schemas.parcels import DeleteResponse, ParcelCreate
from parcel_api.services.auth_base import AuthenticatedUser
from parcel_api.services.parcel_service import parcel_service

router = APIRouter(prefix="/parcels", tags=["Parcels"])

_ID_ERRORS = {
    400: {"description": "Invalid parcel ID", "model": ErrorResponse},
    404: {"description": "Parcel not found", "model": ErrorResponse},
}


@router.get(
    "",
    responses={
        401: {"description": "No bearer token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
    },
    summary="All parcels, or those created by ?email=, latest first",
)
async def list_parcels(
    email: Optional[str] = Query(default=None, description="Filter by creator email"),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await parcel_service.list_parcels(db, email)


@router.get("/{parcel_id}", responses=_ID_ERRORS, summary="Get a parcel by id")
async def get_parcel(
    parcel_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    return await parcel_service.get_parcel(db, parcel_id)


@router.post("", response_model=InsertResponse, summary="Book a parcel")
async def create_parcel(
    body: ParcelCreate,
    db: AsyncSession = Depends(get_db_session),
) -> InsertResponse:
    return await parcel_service.create_parcel(db, body)


@router.delete(
    "/{parcel_id}",
    response_model=DeleteResponse,
    responses=_ID_ERRORS,
    summary="Delete a parcel",
)
async def delete_parcel(
    parcel_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    return await parcel_service.delete_parcel(db, parcel_id)
