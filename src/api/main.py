"""
src/api/main.py
================
FastAPI application factory

Run (development):
    uvicorn src.api.main:app --reload --port 3000

Run (configured from env, with logging):
    python scripts/serve.py

═══════════════════════════════════════════════════════════════════════════

Wiring:
    Settings (from env)  ──►  ProductCatalog ─┐
                         ──►  CredentialVault ├─► app.state.{catalog,vault,tokens}
                         ──►  TokenService   ─┘
    Handlers reach components through request.app.state, so tests can build
    an app around a temporary data directory with create_app(settings).

Lifespan:
    Both collection files are ensured (created, or repaired from seed) before
    the first request is accepted. If a seed file cannot be written at all,
    FatalStartupError propagates out of the lifespan and uvicorn exits with a
    non-zero status.

Error mapping:
    ApiError subclasses          → their own status + {"error", "message"}
    RequestValidationError       → 400 validation_error
    anything else                → 500 internal_error (details only in the log)

═══════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from src.api.routes.auth     import router as auth_router
from src.api.routes.products import router as products_router
from src.api.schemas         import HealthResponse
from src.core.catalog        import ProductCatalog
from src.core.config         import Settings
from src.core.credentials    import CredentialVault
from src.core.errors         import ApiError, FatalStartupError
from src.core.tokens         import TokenService

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ── lifespan ──────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    STARTUP: ensure products.json and users.json hold valid collections.
    SHUTDOWN: nothing to release; every request opens and closes its own files.
    """
    settings: Settings = app.state.settings
    logger.info("Vitrine API starting up (data dir: %s)", settings.data_dir)

    if settings.uses_default_secret:
        logger.warning("JWT_SECRET is not set; tokens are signed with the insecure default key.")

    try:
        app.state.catalog.store.ensure()
        app.state.vault.store.ensure()
    except FatalStartupError as exc:
        logger.critical("Cannot initialise data files, aborting: %s", exc)
        raise

    logger.info("Data files ready. API is now accepting requests.")

    yield   # ← application runs here

    logger.info("Vitrine API shutting down.")


# ── exception handlers ────────────────────────────────────────────────────────

async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code = exc.status_code,
        content     = {"error": exc.code, "message": exc.message},
    )


def _field_name(loc: tuple) -> str:
    """("body", "username") -> "username"; ("body",) or ("body", 0) -> "request body"."""
    parts = loc[1:]
    if not parts or isinstance(parts[0], int):
        return "request body"
    return ".".join(str(p) for p in parts)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({_field_name(tuple(err.get("loc", ()))) for err in exc.errors()})
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code = 400,
        content     = {
            "error":   "validation_error",
            "message": "Missing or invalid fields: " + ", ".join(fields),
        },
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code = 500,
        content     = {"error": "internal_error", "message": "Internal error."},
    )


# ── app factory ───────────────────────────────────────────────────────────────

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title       = "Vitrine API",
        description = (
            "Product catalog backed by self-healing JSON files.\n\n"
            "Reads are public; creating, updating and deleting products, and "
            "changing the password, require `Authorization: Bearer <token>` "
            "from `POST /api/auth/login`."
        ),
        version     = VERSION,
        lifespan    = lifespan,
    )

    app.state.settings = settings
    app.state.catalog  = ProductCatalog(settings)
    app.state.vault    = CredentialVault(settings)
    app.state.tokens   = TokenService(settings)

    # ── CORS ──────────────────────────────────────────────────────────────────
    # allow_credentials stays off: auth travels in the Authorization header,
    # and credentials cannot be combined with a "*" origin.
    logger.debug("CORS allowed origins: %s", settings.allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins  = settings.allowed_origins,
        allow_methods  = ["GET", "POST", "PUT", "DELETE"],
        allow_headers  = ["Content-Type", "Authorization"],
    )

    app.add_exception_handler(ApiError,               _api_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception,              _unhandled_error)

    app.include_router(auth_router,     prefix="/api", tags=["Auth"])
    app.include_router(products_router, prefix="/api", tags=["Products"])

    @app.get(
        "/api/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Readiness check: both collection files are present",
    )
    async def health() -> HealthResponse:
        components = {}
        for name, store in (("products", app.state.catalog.store), ("users", app.state.vault.store)):
            components[name] = "ok" if store.path.is_file() else "missing"
        components["jwt_secret"] = "default" if settings.uses_default_secret else "ok"

        healthy = components["products"] == "ok" and components["users"] == "ok"
        return HealthResponse(
            status     = "healthy" if healthy else "degraded",
            version    = VERSION,
            components = components,
        )

    # Storefront files; mounted last so /api/* and /docs keep precedence.
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        logger.debug("Serving static files from %s", settings.static_dir)

    return app


app = create_app()
