"""
Parcel Delivery Backend — Firebase Token Verifier
===================================================

What:  TokenVerifier implementation for Firebase ID tokens.
How:   firebase-admin checks the token signature against Google's public key
       set, its expiry, audience and issuer. The SDK call is blocking (it may
       fetch the key set over HTTP), so it runs in Starlette's threadpool.
Who:   Built once in the application lifespan and kept on
       app.state.token_verifier.

Initialization:
    The Firebase app is created lazily on the first verification from the
    base64 service-account JSON in settings. A named app is used so that
    repeated construction (reloads, tests) reuses the existing instance.
"""

import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.auth import (
    CertificateFetchError,
    ExpiredIdTokenError,
    InvalidIdTokenError,
    RevokedIdTokenError,
    UserDisabledError,
)
from starlette.concurrency import run_in_threadpool

from parcel_api.exceptions import ConfigurationError, ForbiddenError
from parcel_api.services.auth_base import AuthenticatedUser, TokenVerifier

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "parcel-api"


class FirebaseTokenVerifier(TokenVerifier):
    """
    Verifies Firebase ID tokens.

    Args:
        service_account: Decoded service-account dict (None if not configured)
        firebase_app: An already-initialized firebase_admin.App; skips lazy init
    """

    def __init__(
        self,
        service_account: Optional[Dict[str, Any]] = None,
        firebase_app: Optional[firebase_admin.App] = None,
    ):
        self._service_account = service_account
        self._app = firebase_app

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app

        if not self._service_account:
            raise ConfigurationError(
                message="Token verification is not configured on this server",
                context={"missing": "FIREBASE_SERVICE_ACCOUNT_JSON"},
            )

        try:
            self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            cred = credentials.Certificate(self._service_account)
            self._app = firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)
            logger.info(
                "Firebase app initialized for project %s",
                self._service_account.get("project_id", "unknown"),
            )
        return self._app

    async def verify(self, token: str) -> AuthenticatedUser:
        app = self._get_app()
        try:
            decoded = await run_in_threadpool(auth.verify_id_token, token, app=app)
        except (
            ExpiredIdTokenError,
            RevokedIdTokenError,
            InvalidIdTokenError,
            UserDisabledError,
            CertificateFetchError,
            ValueError,
        ) as e:
            # Never log the token itself
            logger.warning("Token verification failed: %s", type(e).__name__)
            raise ForbiddenError(context={"reason": type(e).__name__})

        return AuthenticatedUser(
            uid=decoded.get("uid") or decoded.get("sub", ""),
            email=decoded.get("email"),
            claims=dict(decoded),
        )
