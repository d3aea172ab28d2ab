"""
Parcel Delivery Backend — Request Authorization
=================================================

What:  Bearer-header extraction, token verification dependency, and the
       ownership guard used by per-user endpoints.
How:   `get_current_user` is a FastAPI dependency:
           1. Read `Authorization: Bearer <token>`
              → absent / wrong scheme / empty token: AuthenticationError (401)
           2. Hand the token to app.state.token_verifier
              → verification failure: ForbiddenError (403)
           3. Attach the claims to request.state.user and return them
       `ensure_same_identity` raises ForbiddenError on an owner mismatch, so
       the handler never runs its query for someone else's data.
"""

import logging
from typing import Optional

from fastapi import Depends, Request

from parcel_api.exceptions import AuthenticationError, ForbiddenError
from parcel_api.services.auth_base import AuthenticatedUser, TokenVerifier

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an Authorization header value or raise 401."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError(message="Unauthorized Access")
    return token


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


async def get_current_user(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedUser:
    token = extract_bearer_token(request.headers.get("Authorization"))
    user = await verifier.verify(token)
    request.state.user = user
    return user


def ensure_same_identity(user: AuthenticatedUser, email: Optional[str]) -> None:
    """
    Authorization guard for "my data" endpoints.

    Compares the requested owner email against the verified one
    (case-insensitive). A missing email on either side is a mismatch.
    """
    if not email or not user.email or user.email.lower() != email.lower():
        logger.warning("Identity mismatch: uid=%s requested another user's data", user.uid)
        raise ForbiddenError(
            message="Unauthorized access!",
            context={"uid": user.uid},
        )
