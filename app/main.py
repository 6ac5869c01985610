"""FastAPI application entry point."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.router import api_router
from app.config import settings
from app.core.background_tasks import (
    start_auto_checkout_scheduler,
    stop_auto_checkout_scheduler,
)
from app.core.exceptions import AppException
from app.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from app.database import AsyncSessionLocal, close_db, get_db, init_db

logger = logging.getLogger(__name__)

# Background task handle
_auto_checkout_task: asyncio.Task | None = None


def configure_logging() -> None:
    """Root logging setup for the API process."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    global _auto_checkout_task

    # Startup
    configure_logging()
    if settings.debug:
        await init_db()

    if settings.auto_checkout_scheduler == "asyncio":
        _auto_checkout_task = asyncio.create_task(
            start_auto_checkout_scheduler(AsyncSessionLocal)
        )
    else:
        logger.info(f"In-process auto-checkout disabled ({settings.auto_checkout_scheduler})")

    yield

    # Shutdown
    stop_auto_checkout_scheduler()
    if _auto_checkout_task:
        _auto_checkout_task.cancel()
        try:
            await _auto_checkout_task
        except asyncio.CancelledError:
            pass
        _auto_checkout_task = None

    await close_db()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Hotel Ortus - Booking back-office API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    # Middleware (order matters - first added = last executed)
    app.add_middleware(SecurityHeadersMiddleware)

    if settings.environment != "development":
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_minute=settings.rate_limit_per_minute,
        )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
        """Liveness plus a database round trip."""
        try:
            await db.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            logger.error(f"Health check database ping failed: {e}")
            database = "unavailable"

        return {
            "status": "healthy" if database == "ok" else "degraded",
            "database": database,
            "version": settings.app_version,
            "environment": settings.environment,
            "auto_checkout": settings.auto_checkout_scheduler,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
