"""
Parcel Delivery Backend — Tracking Service
============================================

What:  Appends tracking events and reads a parcel's tracking history.
Who:   Called by routes/tracking.py.

Tracking logs are an audit trail: there is no update or delete.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import commit_or_raise, parse_object_id
from parcel_api.exceptions import DatabaseError
from parcel_api.models.documents import TrackingLog
from parcel_api.schemas.tracking import TrackingCreate, TrackingCreateResponse

logger = logging.getLogger(__name__)


class TrackingService:

    async def add_log(self, db: AsyncSession, payload: TrackingCreate) -> TrackingCreateResponse:
        """Insert one event; `time` is always the server's clock."""
        parcel_id = parse_object_id(payload.parcel_id, "parcel")
        log = TrackingLog(
            tracking_id=payload.tracking_id,
            parcel_id=parcel_id,
            status=payload.status,
            message=payload.message,
            updated_by=payload.updated_by,
        )
        try:
            db.add(log)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Error posting tracking log: %s", str(e))
            raise DatabaseError(context={"operation": "add_tracking_log"})

        await commit_or_raise(db, "add_tracking_log")

        logger.info("Tracking %s: %s (parcel %s)", payload.tracking_id, payload.status, parcel_id)
        return TrackingCreateResponse(insertedId=log.id)

    async def history(self, db: AsyncSession, tracking_id: str) -> List[Dict[str, Any]]:
        """All events for a tracking id, oldest first."""
        try:
            result = await db.execute(
                select(TrackingLog)
                .where(TrackingLog.tracking_id == tracking_id)
                .order_by(asc(TrackingLog.time), asc(TrackingLog.id))
            )
            return [log.to_document() for log in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Error reading tracking history %s: %s", tracking_id, str(e))
            raise DatabaseError(context={"operation": "tracking_history"})


tracking_service = TrackingService()
