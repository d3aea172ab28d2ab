"""
Parcel Delivery Backend — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── store:           DocumentStore on a throwaway SQLite file (aiosqlite)
    ├── token_verifier:  FakeTokenVerifier with two known users
    ├── payment_gateway: FakePaymentGateway recording every intent
    ├── test_client:     HTTPX AsyncClient wired to the app with the above
    │                    attached to app.state
    ├── alice_headers / bob_headers: Authorization headers for the fake users
    └── mock_db_session: AsyncMock session for service unit tests

The lifespan does not run under ASGITransport, so nothing here touches
Firebase, Stripe or PostgreSQL.
"""

import os

# Override settings for testing BEFORE any parcel_api import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["FIREBASE_SERVICE_ACCOUNT_JSON"] = ""
os.environ["PAYMENT_GATEWAY_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
# The app object is shared by every test; keep the limiter out of the way
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from typing import Dict, List, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from parcel_api.database import DocumentStore  # noqa: E402
from parcel_api.exceptions import ForbiddenError, PaymentGatewayError  # noqa: E402
from parcel_api.services.auth_base import AuthenticatedUser, TokenVerifier  # noqa: E402
from parcel_api.services.payment_base import PaymentGateway  # noqa: E402

ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"


# ══════════════════════════════════════════════════════════════════════════
# Fakes for external providers
# ══════════════════════════════════════════════════════════════════════════

class FakeTokenVerifier(TokenVerifier):
    """Maps fixed tokens to users; any other token fails like an expired one."""

    def __init__(self, users: Dict[str, AuthenticatedUser]):
        self.users = users
        self.calls: List[str] = []

    async def verify(self, token: str) -> AuthenticatedUser:
        self.calls.append(token)
        if token not in self.users:
            raise ForbiddenError(context={"reason": "unknown test token"})
        return self.users[token]


class FakePaymentGateway(PaymentGateway):
    """Returns a predictable client secret, or raises `error` when set."""

    def __init__(self):
        self.amounts: List[int] = []
        self.error: Optional[PaymentGatewayError] = None

    async def create_intent(self, amount: int) -> str:
        self.amounts.append(amount)
        if self.error is not None:
            raise self.error
        return f"pi_test_{amount}_secret_abc"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def store(tmp_path):
    """A real DocumentStore on a fresh SQLite file, tables created."""
    document_store = DocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'parcels.db'}")
    await document_store.create_all()
    yield document_store
    await document_store.dispose()


@pytest.fixture
def token_verifier():
    return FakeTokenVerifier({
        ALICE_TOKEN: AuthenticatedUser(
            uid="uid-alice", email="alice@example.com", claims={"email": "alice@example.com"}
        ),
        BOB_TOKEN: AuthenticatedUser(
            uid="uid-bob", email="bob@example.com", claims={"email": "bob@example.com"}
        ),
    })


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def alice_headers():
    return {"Authorization": f"Bearer {ALICE_TOKEN}"}


@pytest.fixture
def bob_headers():
    return {"Authorization": f"Bearer {BOB_TOKEN}"}


@pytest_asyncio.fixture
async def test_client(store, token_verifier, payment_gateway):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from parcel_api.main import app

    app.state.store = store
    app.state.token_verifier = token_verifier
    app.state.payment_gateway = payment_gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for service unit tests that need no real database.

    Usage:
        mock_db_session.execute.side_effect = SQLAlchemyError("boom")
        with pytest.raises(DatabaseError):
            await user_service.search_users(mock_db_session, "a@x")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session
