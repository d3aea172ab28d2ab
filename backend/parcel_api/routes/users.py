"""
Parcel Delivery Backend — User Route Handlers
===============================================

What:  GET /users/search, PATCH /users/{id}/role, POST /users.
How:   Thin handlers: pull values off the request, delegate to UserService.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_api.database import get_db_session
from parcel_api.schemas.common import ErrorResponse
from parcel_api.schemas.users import (
    RoleUpdate,
    RoleUpdateResponse,
    UserCreate,
    UserUpsertResponse,
)
from parcel_api.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/search",
    responses={400: {"description": "Email missing", "model": ErrorResponse}},
    summary="Search users by partial email",
)
async def search_users(
    email: Optional[str] = Query(default=None, description="Part of the email, any case"),
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await user_service.search_users(db, email)


@router.patch(
    "/{user_id}/role",
    response_model=RoleUpdateResponse,
    responses={
        400: {"description": "Invalid role or id", "model": ErrorResponse},
        404: {"description": "User not found or role already set", "model": ErrorResponse},
    },
    summary="Make or remove an admin",
)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> RoleUpdateResponse:
    return await user_service.update_role(db, user_id, body.role)


@router.post(
    "",
    response_model=UserUpsertResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"description": "User already existed; last_log_in refreshed"},
        201: {"description": "User created"},
    },
    summary="Register a user or record a repeat sign-in",
)
async def upsert_user(
    body: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> UserUpsertResponse:
    result = await user_service.upsert_on_login(db, body)
    if not result.inserted:
        response.status_code = status.HTTP_200_OK
    return result
