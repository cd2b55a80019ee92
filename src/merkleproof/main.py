"""
merkleproof - HTTP Entry Point

Serves tree display, proof generation and membership verification over HTTP.
"""

import signal
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app
from starlette.responses import Response

from merkleproof.api.v1 import router as api_v1_router
from merkleproof.core.config import settings
from merkleproof.core.logging import setup_logging
from merkleproof.metrics import get_merkle_metrics

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "Starting merkleproof API",
        version=settings.VERSION,
        environment=settings.ENV,
    )

    get_merkle_metrics().set_service_info(
        version=settings.VERSION,
        environment=settings.ENV,
    )

    yield

    logger.info("merkleproof API shutdown complete")


def create_application() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(
        title="merkleproof API",
        description="Merkle tree construction and membership verification",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV != "production" else None,
        redoc_url="/redoc" if settings.ENV != "production" else None,
        lifespan=lifespan,
    )

    app.include_router(api_v1_router, prefix="/api/v1")

    if settings.METRICS_ENABLED:
        app.mount("/metrics", make_asgi_app())

    @app.get("/health")
    async def health() -> dict:
        """Overall service health check."""
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
        }

    @app.get("/live")
    async def live() -> Response:
        """Liveness probe."""
        return Response(status_code=200, content="alive")

    @app.get("/status")
    async def status() -> dict:
        """Detailed service status."""
        return {
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "environment": settings.ENV,
            "metrics_enabled": settings.METRICS_ENABLED,
            "max_records": settings.MAX_RECORDS,
        }

    return app


app = create_application()


def handle_signal(signum: int, frame: object) -> None:
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}, initiating shutdown")
    sys.exit(0)


def main() -> None:
    """Run the service."""
    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    logger.info(
        "Starting merkleproof API",
        host=settings.HOST,
        port=settings.PORT,
    )

    uvicorn.run(
        "merkleproof.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
