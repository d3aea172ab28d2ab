"""
Parcel Delivery Backend — User Service
========================================

What:  Search, sign-in upsert, and admin role changes for user documents.
Who:   Called by routes/users.py.

Error Handling Strategy:
    Client mistakes raise ValidationError / NotFoundError directly. Any
    SQLAlchemyError is logged and wrapped in DatabaseError, which the global
    handler turns into a generic 500.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import commit_or_raise, parse_object_id
from parcel_api.exceptions import DatabaseError, NotFoundError, ValidationError
from parcel_api.models.documents import User
from parcel_api.schemas.users import (
    RoleUpdateResponse,
    UserCreate,
    UserUpsertResponse,
)

logger = logging.getLogger(__name__)

# Roles an admin may assign by hand; "rider" is only granted by rider acceptance
ASSIGNABLE_ROLES = ("admin", "user")

SEARCH_LIMIT = 10


class UserService:
    """Business logic for the users collection."""

    async def search_users(self, db: AsyncSession, email: Optional[str]) -> List[Dict[str, Any]]:
        """
        Partial, case-insensitive email search (at most SEARCH_LIMIT hits).

        The query is matched literally: LIKE wildcards in it are escaped.
        """
        if not email:
            raise ValidationError(message="Email is required", field="email")

        try:
            result = await db.execute(
                select(User)
                .where(User.email.icontains(email, autoescape=True))
                .order_by(User.email)
                .limit(SEARCH_LIMIT)
            )
            return [user.to_document() for user in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Error searching users: %s", str(e))
            raise DatabaseError(context={"operation": "search_users"})

    async def upsert_on_login(self, db: AsyncSession, payload: UserCreate) -> UserUpsertResponse:
        """
        Record a sign-in.

        Existing email: refresh last_log_in, report inserted=False.
        New email: insert a user document with role "user", report inserted=True.
        """
        now_iso = datetime.now(timezone.utc).isoformat()
        user = None
        try:
            result = await db.execute(select(User).where(User.email == payload.email).limit(1))
            existing = result.scalar_one_or_none()

            if existing is not None:
                existing.last_log_in = now_iso
            else:
                user = User(
                    email=payload.email,
                    role="user",
                    last_log_in=payload.last_log_in or now_iso,
                    extra=payload.extra_fields("role"),
                )
                if payload.created_at is not None:
                    user.created_at = payload.created_at
                db.add(user)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Error saving user: %s", str(e))
            raise DatabaseError(context={"operation": "upsert_on_login"})

        await commit_or_raise(db, "upsert_on_login")

        if user is None:
            logger.info("User %s signed in again", existing.id)
            return UserUpsertResponse(message="User already exists!", inserted=False)
        logger.info("User %s created", user.id)
        return UserUpsertResponse(message="User created", inserted=True, insertedId=user.id)

    async def update_role(self, db: AsyncSession, user_id: str, role: Optional[str]) -> RoleUpdateResponse:
        """
        Make or remove an admin.

        A user that already has the requested role is not modified, which is
        reported as 404 just like an unknown id.
        """
        if role not in ASSIGNABLE_ROLES:
            raise ValidationError(
                message="Invalid role. Only 'admin' or 'user' allowed.",
                field="role",
            )
        user_id = parse_object_id(user_id, "user")

        try:
            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .where(or_(User.role.is_(None), User.role != role))
                .values(role=role)
            )
        except SQLAlchemyError as e:
            logger.error("Failed to update user role: %s", str(e))
            raise DatabaseError(context={"operation": "update_role", "user_id": user_id})

        if result.rowcount == 0:
            raise NotFoundError(
                resource="user",
                resource_id=user_id,
                message="User not found or role already set",
            )

        await commit_or_raise(db, "update_role")

        logger.info("User %s role set to %s", user_id, role)
        return RoleUpdateResponse(
            message=f"User role updated to {role}",
            modifiedCount=result.rowcount,
        )


user_service = UserService()
