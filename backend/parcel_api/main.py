"""
Parcel Delivery Backend — FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn parcel_api.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Req ID      │→│ Rate Lim │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────┐ ┌────────┐ ┌─────────┐ ┌──────────────┐ │
    │  │ /users │ │/riders │ │/parcels │ │ /tracking    │ │
    │  └────────┘ └────────┘ └─────────┘ └──────────────┘ │
    │  ┌──────────────────────────────┐ ┌───────────────┐ │
    │  │ /payments, /create-payment-  │ │ /, /health    │ │
    │  │ intent                       │ │               │ │
    │  └──────────────────────────────┘ └───────────────┘ │
    │                                                     │
    │  app.state: store │ token_verifier │ payment_gateway│
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report missing credentials (logged, not fatal)
    3. Attach the DocumentStore, token verifier and payment gateway to
       app.state (anything already attached, e.g. by tests, is kept)
    4. Create tables when DB_AUTO_CREATE is set

    Shutdown:
    1. Dispose the DocumentStore engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from parcel_api import __version__
from parcel_api.config import settings
from parcel_api.database import DocumentStore
from parcel_api.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ParcelServiceError,
    PaymentGatewayError,
    ValidationError,
)
from parcel_api.middleware.logging import RequestLoggingMiddleware
from parcel_api.middleware.rate_limit import RateLimitMiddleware
from parcel_api.middleware.request_id import RequestIDMiddleware, request_id_var
from parcel_api.routes import health, parcels, payments, riders, tracking, users
from parcel_api.services.firebase_service import FirebaseTokenVerifier
from parcel_api.services.stripe_service import StripePaymentGateway

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

def build_token_verifier() -> FirebaseTokenVerifier:
    """
    A verifier built from settings. A malformed service account is logged and
    leaves the verifier unconfigured: authenticated endpoints then answer 500
    while the rest of the API keeps working.
    """
    try:
        service_account = settings.firebase_service_account
    except ValueError as e:
        logger.error("Firebase credentials unusable: %s", str(e))
        service_account = None
    return FirebaseTokenVerifier(service_account)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: attach collaborators to app.state. Shutdown: release the store."""
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Parcel Delivery Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        # Not fatal: everything except the unconfigured features still works

    if getattr(app.state, "store", None) is None:
        app.state.store = DocumentStore.from_settings(settings)
    if getattr(app.state, "token_verifier", None) is None:
        app.state.token_verifier = build_token_verifier()
    if getattr(app.state, "payment_gateway", None) is None:
        app.state.payment_gateway = StripePaymentGateway(
            settings.payment_gateway_key,
            currency=settings.payment_currency,
        )

    if settings.db_auto_create:
        logger.info("DB_AUTO_CREATE is set: creating missing tables")
        await app.state.store.create_all()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Parcel Delivery Backend shutting down...")
    await app.state.store.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError, RequestValidationError → 400 Bad Request
        AuthenticationError                     → 401 Unauthorized
        ForbiddenError                          → 403 Forbidden
        NotFoundError                           → 404 Not Found
        DatabaseError                           → 500 (generic message)
        PaymentGatewayError                     → 500 (provider message)
        ConfigurationError                      → 500
        ParcelServiceError (base)               → 500
        Exception (fallback)                    → 500 (traceback logged)

    Responses never carry stack traces, SQL or credentials.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Missing or mistyped body/query fields: 400, same shape as ValidationError."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return _error_response(
            400,
            "validation_error",
            message,
            {"errors": jsonable_encoder(errors, exclude={"input", "ctx"})},
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(401, "unauthorized", exc.message)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning("[%s] Forbidden: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        # Context is logged server-side only
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(PaymentGatewayError)
    async def handle_payment_gateway_error(request: Request, exc: PaymentGatewayError):
        logger.error("[%s] Payment gateway error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "payment_gateway_error", exc.message)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "configuration_error", exc.message)

    @app.exception_handler(ParcelServiceError)
    async def handle_service_error(request: Request, exc: ParcelServiceError):
        logger.error("[%s] Service error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Parcel Delivery API",
        description=(
            "Backend for a parcel delivery service: users and roles, rider "
            "applications, parcel booking, tracking history and card payments."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(riders.router)
    app.include_router(parcels.router)
    app.include_router(tracking.router)
    app.include_router(payments.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
