"""
Parcel Delivery Backend — Authorization Tests
===============================================

What:  Bearer header parsing, the identity guard, and the Firebase verifier
       with firebase-admin's verify_id_token mocked out.
"""

from unittest.mock import MagicMock, patch

import pytest
from firebase_admin.auth import ExpiredIdTokenError, InvalidIdTokenError

from parcel_api.auth import ensure_same_identity, extract_bearer_token
from parcel_api.exceptions import AuthenticationError, ConfigurationError, ForbiddenError
from parcel_api.services.auth_base import AuthenticatedUser
from parcel_api.services.firebase_service import FirebaseTokenVerifier

VERIFY_ID_TOKEN = "parcel_api.services.firebase_service.auth.verify_id_token"


class TestExtractBearerToken:

    def test_returns_token(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [None, "", "abc.def.ghi", "Basic abc", "bearer abc"])
    def test_missing_or_wrong_scheme(self, header):
        with pytest.raises(AuthenticationError) as exc_info:
            extract_bearer_token(header)
        assert exc_info.value.message == "Unauthorized: No token provided"

    def test_empty_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            extract_bearer_token("Bearer    ")
        assert exc_info.value.message == "Unauthorized Access"


class TestEnsureSameIdentity:

    def setup_method(self):
        self.user = AuthenticatedUser(uid="u1", email="alice@example.com")

    def test_same_email_passes(self):
        ensure_same_identity(self.user, "ALICE@example.com")

    @pytest.mark.parametrize("email", ["bob@example.com", "", None])
    def test_other_or_missing_email_is_forbidden(self, email):
        with pytest.raises(ForbiddenError) as exc_info:
            ensure_same_identity(self.user, email)
        assert exc_info.value.message == "Unauthorized access!"

    def test_token_without_email_is_forbidden(self):
        anonymous = AuthenticatedUser(uid="u2", email=None)

        with pytest.raises(ForbiddenError):
            ensure_same_identity(anonymous, "alice@example.com")


class TestFirebaseTokenVerifier:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        firebase_app = MagicMock()
        verifier = FirebaseTokenVerifier(firebase_app=firebase_app)

        with patch(VERIFY_ID_TOKEN, return_value={"uid": "u1", "email": "alice@example.com"}) as verify:
            user = await verifier.verify("good-token")

        verify.assert_called_once_with("good-token", app=firebase_app)
        assert user.uid == "u1"
        assert user.email == "alice@example.com"
        assert user.claims["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_uid_falls_back_to_sub(self):
        verifier = FirebaseTokenVerifier(firebase_app=MagicMock())

        with patch(VERIFY_ID_TOKEN, return_value={"sub": "sub-1"}):
            user = await verifier.verify("good-token")

        assert user.uid == "sub-1"
        assert user.email is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ExpiredIdTokenError("Token expired", cause=None),
        InvalidIdTokenError("Wrong signature"),
        ValueError("Illegal ID token provided"),
    ])
    async def test_rejected_token_is_forbidden(self, error):
        verifier = FirebaseTokenVerifier(firebase_app=MagicMock())

        with patch(VERIFY_ID_TOKEN, side_effect=error):
            with pytest.raises(ForbiddenError) as exc_info:
                await verifier.verify("bad-token")

        assert exc_info.value.context["reason"] == type(error).__name__

    @pytest.mark.asyncio
    async def test_unconfigured_verifier(self):
        verifier = FirebaseTokenVerifier(service_account=None)

        with patch(VERIFY_ID_TOKEN) as verify:
            with pytest.raises(ConfigurationError):
                await verifier.verify("any-token")

        verify.assert_not_called()

    def test_existing_named_app_is_reused(self):
        existing = MagicMock()
        verifier = FirebaseTokenVerifier(service_account={"project_id": "parcels-test"})

        with patch("parcel_api.services.firebase_service.firebase_admin.get_app",
                   return_value=existing) as get_app, \
             patch("parcel_api.services.firebase_service.firebase_admin.initialize_app") as init:
            assert verifier._get_app() is existing

        get_app.assert_called_once_with("parcel-api")
        init.assert_not_called()
