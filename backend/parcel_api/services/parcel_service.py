"""
Parcel Delivery Backend — Parcel Service
==========================================

What:  CRUD over the parcels collection.
Who:   Called by routes/parcels.py.

Ids are validated with parse_object_id before any query, so a malformed id
is a 400 that never reaches the database.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import commit_or_raise, parse_object_id
from parcel_api.exceptions import DatabaseError, NotFoundError
from parcel_api.models.documents import Parcel
from parcel_api.schemas.common import InsertResponse
from parcel_api.schemas.parcels import DeleteResponse, ParcelCreate

logger = logging.getLogger(__name__)


class ParcelService:
    """Business logic for the parcels collection."""

    async def list_parcels(self, db: AsyncSession, email: Optional[str] = None) -> List[Dict[str, Any]]:
        """All parcels (or those created by `email`), latest first."""
        query = select(Parcel)
        if email:
            query = query.where(Parcel.created_by == email)
        query = query.order_by(desc(Parcel.creation_date), desc(Parcel.id))

        try:
            result = await db.execute(query)
            return [parcel.to_document() for parcel in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Error fetching parcels: %s", str(e))
            raise DatabaseError(
                message="Failed to fetch parcels",
                context={"operation": "list_parcels"},
            )

    async def get_parcel(self, db: AsyncSession, parcel_id: str) -> Dict[str, Any]:
        parcel_id = parse_object_id(parcel_id, "parcel")
        try:
            parcel = await db.get(Parcel, parcel_id)
        except SQLAlchemyError as e:
            logger.error("Error fetching parcel %s: %s", parcel_id, str(e))
            raise DatabaseError(context={"operation": "get_parcel", "parcel_id": parcel_id})

        if parcel is None:
            raise NotFoundError(resource="parcel", resource_id=parcel_id)
        return parcel.to_document()

    async def create_parcel(self, db: AsyncSession, payload: ParcelCreate) -> InsertResponse:
        parcel = Parcel(
            tracking_id=payload.tracking_id,
            created_by=payload.created_by,
            payment_status="unpaid",
            extra=payload.extra_fields("payment_status"),
        )
        if payload.creation_date is not None:
            parcel.creation_date = payload.creation_date
        if payload.delivery_status:
            parcel.delivery_status = payload.delivery_status

        try:
            db.add(parcel)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to insert parcel: %s", str(e))
            raise DatabaseError(
                message="Failed to insert parcel",
                context={"operation": "create_parcel"},
            )

        await commit_or_raise(db, "create_parcel")

        logger.info("Parcel %s created by %s", parcel.id, parcel.created_by or "anonymous")
        return InsertResponse(insertedId=parcel.id)

    async def delete_parcel(self, db: AsyncSession, parcel_id: str) -> DeleteResponse:
        parcel_id = parse_object_id(parcel_id, "parcel")
        try:
            result = await db.execute(delete(Parcel).where(Parcel.id == parcel_id))
        except SQLAlchemyError as e:
            logger.error("Delete error for parcel %s: %s", parcel_id, str(e))
            raise DatabaseError(context={"operation": "delete_parcel", "parcel_id": parcel_id})

        if result.rowcount == 0:
            raise NotFoundError(resource="parcel", resource_id=parcel_id, message="Parcel not found.")

        await commit_or_raise(db, "delete_parcel")

        logger.info("Parcel %s deleted", parcel_id)
        return DeleteResponse(
            message="Parcel deleted successfully.",
            deletedCount=result.rowcount,
        )


parcel_service = ParcelService()
