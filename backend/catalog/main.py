"""
Catalog Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn catalog.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                       FastAPI App                       │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌──────┐         │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│ CORS │         │
    │  └──────────┘ └─────────────┘ └──────┘ └──────┘         │
    │                                                         │
    │  Routes:                                                │
    │  /categories  /products  /subCategories  /brands        │
    │  /variantTypes  /variants  /health                      │
    │                                                         │
    │  Exception Handlers (all → {success: false, message}):  │
    │  Validation/Conflict→400 │ Upload→400/500 │ NotFound→404│
    │  Persistence→500 │ request validation→400 │ other→500   │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (missing Cloudinary credentials
              are logged, uploads then fail with a clear message)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog import __version__
from catalog.config import settings
from catalog.database import dispose_engine
from catalog.exceptions import (
    CatalogError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    UploadError,
    ValidationError,
)
from catalog.middleware.logging import RequestLoggingMiddleware
from catalog.middleware.request_id import RequestIDMiddleware, request_id_var
from catalog.routes import categories, health, products, reference

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """
    Configure logging for the whole application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Catalog Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Reads keep working; uploads report the problem per request
        logger.error("Configuration error: %s", e)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Catalog Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the `{success: false, message}` envelope.

    Handler hierarchy:
        ValidationError, ConflictError → 400
        UploadError                    → its own status (400 payload, 500 provider)
        NotFoundError                  → 404
        PersistenceError               → 500, generic message
        CatalogError (base)            → its status
        RequestValidationError         → 400 (malformed UUID in the path, bad JSON body)
        HTTPException                  → its status (unknown route, wrong method)
        Exception                      → 500, stack trace logged server-side only
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error(400, exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("[%s] Delete refused: %s", request_id_var.get(""), exc.message)
        return _error(400, exc.message)

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] Upload error: %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.warning("[%s] Upload rejected: %s", rid, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, exc.message)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error(500, exc.message)

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(request: Request, exc: CatalogError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid value for {location}: {first.get('msg', 'invalid')}" if location else "Invalid request."
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            exc,
            exc_info=True,
        )
        return _error(500, "An unexpected error occurred. Please try again later.")


def create_app() -> FastAPI:
    """Assemble the application: middleware, exception handlers, routers."""
    app = FastAPI(
        title="Catalog API",
        description=(
            "E-commerce catalog backend: categories and products with images "
            "stored on Cloudinary, plus the reference data products point at."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(categories.router)
    app.include_router(products.router)
    for router in reference.routers:
        app.include_router(router)
    app.include_router(health.router)

    return app


app = create_app()
