"""
Rent The Moment Backend — FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       the lifespan owns the Database handle (connect → serve → dispose).
Who:   uvicorn rentmoment.main:app

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → Security → GZip →   │
    │               CORS                                       │
    │                                                          │
    │  Routes (/api): auth, categories, products, merchants,   │
    │                 orders, users, upload/files, health      │
    │                                                          │
    │  Exception Handlers:                                     │
    │    RentMomentError → its status_code (400…504)           │
    │    RequestValidationError → 400 "Validation errors"      │
    │    Exception → 500                                       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → storage dir → Database.connect()
    Shutdown: Database.dispose()
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rentmoment import __version__
from rentmoment.config import settings
from rentmoment.database import Database
from rentmoment.exceptions import RentMomentError
from rentmoment.middleware.logging import RequestLoggingMiddleware
from rentmoment.middleware.request_id import RequestIDMiddleware, request_id_var
from rentmoment.middleware.security_headers import SecurityHeadersMiddleware
from rentmoment.routes import (
    auth,
    categories,
    health,
    merchants,
    orders,
    products,
    upload,
    users,
)

logger = logging.getLogger(__name__)

# Any localhost port is accepted outside production (dev servers move around)
LOCALHOST_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configure the root logger once; every module logs via getLogger(__name__)."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Rent The Moment backend starting up (%s)...", settings.environment)

    # Refuse to serve production traffic with development secrets
    settings.validate_required_for_production()

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    database = Database.from_settings()
    await database.connect(create_tables=settings.db_auto_create)
    app.state.database = database

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Rent The Moment backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, **extra: Any) -> Dict[str, Any]:
    body = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    body.update(extra)
    return body


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        # loc is ("body" | "query" | "path", field, ...)
        loc = [str(part) for part in err.get("loc", ())]
        errors.append(
            {
                "field": ".".join(loc[1:]) or ".".join(loc),
                "location": loc[0] if loc else "",
                "message": err.get("msg", "Invalid value"),
            }
        )
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    One handler per failure family; every body has the same shape:
        {"success": false, "error": <code>, "message": ..., "request_id": ...}

    Internal context (table names, driver errors) is logged, and only echoed
    back as `details` when ENVIRONMENT=development.
    """

    @app.exception_handler(RentMomentError)
    async def handle_app_error(request: Request, exc: RentMomentError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        extra = {}
        if settings.environment == "development" and exc.context:
            extra["details"] = exc.context
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, **extra),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        logger.info("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Validation errors", errors=errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404:
            message = "Route not found"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("http_error", message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        extra = {}
        if settings.environment == "development":
            extra["details"] = {"exception": str(exc)}
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "Server error", **extra),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Rent The Moment API",
        description="Clothing rental storefront and admin back office.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → SecurityHeaders → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_origin_regex=None if settings.is_production else LOCALHOST_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(merchants.router)
    app.include_router(orders.router)
    app.include_router(users.router)
    app.include_router(upload.router)
    app.include_router(health.router)

    return app


app = create_app()
