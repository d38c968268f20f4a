"""
Exam Builder Backend — FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn app.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  RequestLogging → CORS                 │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────────┐ ┌──────────────┐ │
    │  │ /users  GET POST PUT DELETE  │ │ GET /health  │ │
    │  └──────────────────────────────┘ └──────────────┘ │
    │                                                     │
    │  Exception Handlers (keyed on ErrorKind):           │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ invalid/missing/duplicate/in-use → 400       │  │
    │  │ not_found → 404 │ unexpected → 500           │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Every error body has the shape {success: false, message, error?}.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import ErrorKind, ExamBuilderError
from app.middleware import RequestLoggingMiddleware, request_id_var
from app.routes import health, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging for the whole process.

    Called once from the lifespan before anything else logs. Third-party
    loggers that chatter at INFO are raised to WARNING.
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
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging and config checks. Shutdown: close pooled connections."""
    setup_logging()
    logger.info("%s %s starting up...", settings.api_title, __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: /health will report the database as unreachable
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("Health check: http://%s:%d/health", settings.backend_host, settings.backend_port)

    yield

    logger.info("Shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map failures to `{success: false, message, error?}` responses.

    Handler table:
        ExamBuilderError        → STATUS_BY_KIND[exc.kind]
        RequestValidationError  → 400 (unparseable body, bad role value)
        HTTPException           → its own status (404 for unknown routes)
        Exception               → 500
    """

    @app.exception_handler(ExamBuilderError)
    async def handle_app_error(request: Request, exc: ExamBuilderError):
        rid = request_id_var.get("")
        content = {"success": False, "message": exc.message}

        if exc.kind is ErrorKind.UNEXPECTED:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
            content["error"] = exc.detail
        else:
            logger.info("[%s] %s: %s", rid, exc.kind.value, exc.message)

        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body') or 'body'}: {err.get('msg')}"
            for err in errors
        )
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request body", "error": detail},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Route {request.method} {request.url.path} not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unhandled error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error", "error": str(exc)},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, handlers and routers into a FastAPI app."""
    app = FastAPI(
        title=settings.api_title,
        description="User management for the exam builder: teachers and administrators.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestLogging wraps CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)

    return app


app = create_app()
