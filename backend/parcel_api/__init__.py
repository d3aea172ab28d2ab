"""
Parcel Delivery Backend — Application Package Initializer
==========================================================

What: Marks the `parcel_api` directory as a Python package.
Who:  Used by uvicorn (`uvicorn parcel_api.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows the same layered split for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Auth (token verifier + guard)      │  ← Bearer credential → claims
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, cascades, payments
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy tables + Pydantic
    ├─────────────────────────────────────┤
    │    DocumentStore (Persistence)      │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    External collaborators (Firebase identity, Stripe payments) sit behind
    small abstract interfaces in `services/` and are attached to `app.state`
    at startup, next to the DocumentStore.
"""

__version__ = "1.0.0"
