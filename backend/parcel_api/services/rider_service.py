"""
Parcel Delivery Backend — Rider Service (Role Transition)
===========================================================

What:  Rider applications: listing, creation, and status changes including
       the promotion of the applicant's user account on acceptance.
Who:   Called by routes/riders.py.

Role Transition (PATCH /riders/{id}):
    1. Load the rider application (400 bad id, 404 unknown)
    2. Resolve the applicant email from the application itself; a body email
       is only compared against it (400 on mismatch, before any write)
    3. Set the new status
    4. If status == "accepted": set role = "rider" on the user with that email
       (compared without regard to letter case)

    Steps 3 and 4 share the request's session and commit together, so a
    failure in step 4 also discards step 3.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import commit_or_raise, parse_object_id
from parcel_api.exceptions import DatabaseError, NotFoundError, ValidationError
from parcel_api.models.documents import Rider, User
from parcel_api.schemas.riders import RiderCreate, RiderStatusResponse

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
RIDER_ROLE = "rider"


class RiderService:
    """Business logic for the riders collection."""

    async def list_by_status(self, db: AsyncSession, status: str) -> List[Dict[str, Any]]:
        """Riders with the given status, newest application first."""
        try:
            result = await db.execute(
                select(Rider)
                .where(Rider.status == status)
                .order_by(desc(Rider.created_at))
            )
            return [rider.to_document() for rider in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Error fetching %s riders: %s", status, str(e))
            raise DatabaseError(context={"operation": "list_riders", "status": status})

    async def create_rider(self, db: AsyncSession, payload: RiderCreate) -> str:
        rider = Rider(
            name=payload.name,
            email=payload.email,
            status=STATUS_PENDING,
            extra=payload.extra_fields("status"),
        )
        if payload.created_at is not None:
            rider.created_at = payload.created_at

        try:
            db.add(rider)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Error adding rider: %s", str(e))
            raise DatabaseError(context={"operation": "create_rider"})

        await commit_or_raise(db, "create_rider")

        logger.info("Rider application %s created", rider.id)
        return rider.id

    async def update_status(
        self,
        db: AsyncSession,
        rider_id: str,
        status: str,
        email: Optional[str] = None,
    ) -> RiderStatusResponse:
        rider_id = parse_object_id(rider_id, "rider")

        try:
            rider = await db.get(Rider, rider_id)
        except SQLAlchemyError as e:
            logger.error("Error loading rider %s: %s", rider_id, str(e))
            raise DatabaseError(context={"operation": "update_rider_status"})

        if rider is None:
            raise NotFoundError(resource="rider", resource_id=rider_id)

        applicant_email = self._resolve_applicant_email(rider, email)
        if status == STATUS_ACCEPTED and not applicant_email:
            raise ValidationError(
                message="Cannot accept a rider without an email to promote",
                field="email",
            )

        modified = 0 if rider.status == status else 1
        role_updated = False
        try:
            rider.status = status
            await db.flush()

            if status == STATUS_ACCEPTED:
                result = await db.execute(
                    update(User)
                    .where(func.lower(User.email) == applicant_email.strip().lower())
                    .values(role=RIDER_ROLE)
                    .execution_options(synchronize_session=False)
                )
                role_updated = result.rowcount > 0
                if not role_updated:
                    logger.warning(
                        "Rider %s accepted but no user account found for its email",
                        rider_id,
                    )
        except SQLAlchemyError as e:
            logger.error("Error updating rider %s: %s", rider_id, str(e))
            raise DatabaseError(context={"operation": "update_rider_status", "rider_id": rider_id})

        await commit_or_raise(db, "update_rider_status")

        logger.info("Rider %s status set to %s (role_updated=%s)", rider_id, status, role_updated)
        return RiderStatusResponse(
            matchedCount=1,
            modifiedCount=modified,
            userRoleUpdated=role_updated,
        )

    @staticmethod
    def _resolve_applicant_email(rider: Rider, claimed: Optional[str]) -> Optional[str]:
        """
        The email stored on the application wins; a differing claimed email is
        rejected rather than trusted.
        """
        if rider.email:
            if claimed and claimed.strip().lower() != rider.email.strip().lower():
                raise ValidationError(
                    message="Email does not match the rider application",
                    field="email",
                )
            return rider.email
        return claimed or None


rider_service = RiderService()
