"""User Service - FastAPI Application."""

import time
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from userapi import __version__
from userapi.boot import Bootloader, BootMode
from userapi.config import settings
from userapi.database import close_db, init_db
from userapi.deps import DbSession
from userapi.logger import configure_logging, get_logger, log_exception
from userapi.routers import users

# Initialize logging early
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - validate environment and init DB on startup."""
    # Will sys.exit(1) if critical checks fail
    await Bootloader.validate(mode=BootMode.CRITICAL)
    await init_db()
    logger.info("Application started", version=__version__)
    yield
    await close_db()
    logger.info("Application shutting down")


app = FastAPI(
    title="User Service API",
    description="CRUD service for the User resource",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def logging_middleware(request: Request, call_next: Any) -> Response:
    """Middleware to inject Request-ID and log request details."""
    request_id = request.headers.get("X-Request-ID", str(uuid4()))

    # structlog.contextvars are isolated per async context/task
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        logger.info(
            "HTTP Request",
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response
    except Exception as exc:
        duration = time.perf_counter() - start_time
        logger.exception(
            "HTTP Request Failed",
            duration_ms=round(duration * 1000, 2),
            error=str(exc),
        )
        raise


def _request_id(request: Request) -> str:
    return (
        structlog.contextvars.get_contextvars().get("request_id")
        or request.headers.get("X-Request-ID")
        or str(uuid4())
    )


def _error_body(detail: str, exc: Exception, request_id: str) -> dict[str, Any]:
    return {
        "detail": str(exc) if settings.debug else detail,
        "trace": "".join(traceback.format_exception(exc)) if settings.debug else None,
        "request_id": request_id,
    }


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures (connectivity, constraint violations) become a plain 500."""
    log_exception(logger, exc, "Database error while handling request", include_traceback=False)
    return JSONResponse(
        status_code=500,
        content=_error_body("A database error occurred", exc, _request_id(request)),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler to ensure JSON response.

    Runs outside logging_middleware, so the X-Request-ID header is set here.
    """
    request_id = _request_id(request)
    return JSONResponse(
        status_code=500,
        content=_error_body("An internal server error occurred. Please try again later.", exc, request_id),
        headers={"X-Request-ID": request_id},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["Location", "X-Request-ID"],
)

app.include_router(users.router)


@app.get("/health")
async def health_check(db: DbSession) -> Response:
    """Check application health status.

    Returns 200 if the database answers, 503 otherwise.
    """
    try:
        await db.execute(text("SELECT 1"))
        database_ok = True
    except Exception as exc:
        log_exception(logger, exc, "Health check: database unreachable", include_traceback=False)
        database_ok = False

    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "unhealthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": {"database": database_ok},
            "version": __version__,
        },
    )
