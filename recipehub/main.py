"""
RecipeHub Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn recipehub.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐                 │
    │  │ Rate Limit │→│  Req ID  │→│ Logging │                 │
    │  └────────────┘ └──────────┘ └─────────┘                 │
    │                                                          │
    │  Routes:                                                 │
    │  /api/recipes  /api/comments  /api/folders               │
    │  /uploads/{path}  /health                                │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400  Auth→401  Forbidden→403  NotFound→404   │
    │  Mismatch→400    Conflict→409  RateLimit→429  Other→500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → storage directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from recipehub import __version__
from recipehub.config import settings
from recipehub.database import dispose_engine
from recipehub.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    FileStorageError,
    ForbiddenError,
    NotFoundError,
    RateLimitExceededError,
    RecipeHubError,
    ReferenceMismatchError,
    ValidationError,
)
from recipehub.middleware.logging import RequestLoggingMiddleware
from recipehub.middleware.rate_limit import RateLimitMiddleware
from recipehub.middleware.request_id import RequestIDMiddleware, request_id_var
from recipehub.routes import comments, folders, health, recipes, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] recipehub.services.recipe_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("RecipeHub Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Public routes keep working; private routes answer 401
        logger.error("Configuration error: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Image storage: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("RecipeHub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _describe_validation_errors(exc: RequestValidationError) -> list:
    """Flatten pydantic errors to [{"field": "body.title", "message": "Title is required"}]."""
    described = []
    for err in exc.errors():
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        described.append({
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": message,
        })
    return described


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400 validation_error
        ReferenceMismatchError                   → 400 reference_mismatch
        AuthenticationError                      → 401 unauthenticated
        ForbiddenError                           → 403 forbidden
        NotFoundError                            → 404 not_found
        ConflictError (and subclasses)           → 409 <exc.code>
        RateLimitExceededError                   → 429 rate_limit_exceeded
        DatabaseError / FileStorageError         → 500 server_error
        RecipeHubError / Exception               → 500 internal_server_error

    Context dicts are logged, never returned, except where they are the
    client's own input (validation field, retry_after).
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = _describe_validation_errors(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        message = errors[0]["message"] if len(errors) == 1 else "Request validation failed"
        return _error_response(400, "validation_error", message, details={"errors": errors})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        details = {"field": exc.field} if exc.field else None
        return _error_response(400, "validation_error", exc.message, details=details)

    @app.exception_handler(ReferenceMismatchError)
    async def handle_reference_mismatch(request: Request, exc: ReferenceMismatchError):
        return _error_response(400, "reference_mismatch", exc.message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.info("[%s] Unauthenticated: %s", request_id_var.get(""), exc.message)
        return _error_response(
            401, "unauthenticated", exc.message, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return _error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(
            429,
            "rate_limit_exceeded",
            exc.message,
            details={"retry_after": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(RecipeHubError)
    async def handle_recipehub_error(request: Request, exc: RecipeHubError):
        logger.error(
            "[%s] Unhandled application error %s: %s | Context: %s",
            request_id_var.get(""), type(exc).__name__, exc.message, exc.context,
        )
        return _error_response(
            500, "internal_server_error", "An unexpected error occurred. Please try again."
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500, "internal_server_error", "An unexpected error occurred. Please try again."
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Assemble a fully configured application.

    Each call returns an independent app (its own rate limiter state),
    which is what the tests rely on.
    """
    app = FastAPI(
        title="RecipeHub API",
        description=(
            "Recipe sharing backend: recipes with fork lineage, per-recipe "
            "comments, likes and user-curated folders."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
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
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(recipes.router)
    app.include_router(comments.router)
    app.include_router(folders.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()
