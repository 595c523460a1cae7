"""
CalyCompta module registry — main application.

Assembles all packages: config, middleware, modules, roles, audit, clubs.
"""

import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from calycompta.config import db_manager, settings
from calycompta.middleware import AuthMiddleware
from calycompta.modules.catalog import build_catalog
from calycompta.utils import Logger
from calycompta.utils.exceptions import RegistryError

# ── Route imports ────────────────────────────────────────────────
from calycompta.audit.routes import audit_router
from calycompta.modules.routes import modules_router
from calycompta.registry.routes import clubs_router
from calycompta.roles.routes import roles_router

logger = Logger("request")


# ── Request Logging Middleware ───────────────────────────────────
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request: method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception:
            duration = round((time.time() - start) * 1000, 2)
            logger.error(f"<-- {method} {path} | 500 | {duration}ms")
            raise

        duration = round((time.time() - start) * 1000, 2)
        status = response.status_code

        if status >= 500:
            logger.error(f"<-- {method} {path} | {status} | {duration}ms")
        elif status >= 400:
            logger.warning(f"<-- {method} {path} | {status} | {duration}ms")
        else:
            logger.info(f"<-- {method} {path} | {status} | {duration}ms")

        return response


# ── Lifespan ─────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    await db_manager.connect()
    try:
        app.state.catalog = await build_catalog(db_manager.database)
    except RegistryError as e:
        # Retried lazily on the first request that needs it.
        logger.warning(f"Catalog not loaded at startup: {e.message}")
    yield
    db_manager.close()


# ── App factory ──────────────────────────────────────────────────
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Per-club module installation and role permission registry",
        docs_url="/api/docs",
        lifespan=lifespan,
    )
    app.state.catalog = None
    app.state.module_hooks = {}

    # ── CORS (must be first) ─────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allowed_methods,
        allow_headers=settings.cors_allowed_headers,
    )

    # ── Request logging (runs on every request) ──────────────
    app.add_middleware(RequestLoggingMiddleware)

    # ── JWT identity ─────────────────────────────────────────
    app.add_middleware(AuthMiddleware)

    # ── Exception handlers ───────────────────────────────────
    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.to_dict()},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}:")
        logger.error(traceback.format_exc())
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": 500,
                    "message": str(exc) if settings.debug else "Internal server error",
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    # ── Routes ───────────────────────────────────────────────
    v = settings.api_version  # "v1"

    app.include_router(
        modules_router,
        prefix=f"/api/{v}/modules",
        tags=["Modules"],
    )
    app.include_router(
        roles_router,
        prefix=f"/api/{v}/roles",
        tags=["Roles & Permissions"],
    )
    app.include_router(
        audit_router,
        prefix=f"/api/{v}/audit-logs",
        tags=["Audit Logs"],
    )
    app.include_router(
        clubs_router,
        prefix=f"/api/{v}/clubs",
        tags=["Club Setup"],
    )

    # ── Health check ─────────────────────────────────────────
    @app.get("/health")
    async def health():
        catalog = app.state.catalog
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "database": db_manager.is_connected,
            "catalog": catalog.source if catalog is not None else None,
        }

    return app


# ── Create the app instance ──────────────────────────────────────
app = create_app()
