"""Application entry point for the seeding dashboard backend."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

# Setup logging as the absolute first step before any app imports
from seedboard.logging_config import setup_logging
setup_logging()

import structlog
from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from seedboard.api import api_router
from seedboard.config import settings
from seedboard.db import close_db, engine, init_db

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager."""
    logger.info("Starting seeding dashboard backend")
    await init_db()

    yield

    logger.info("Shutting down seeding dashboard backend")
    await close_db()


app = FastAPI(
    title="Seeding Dashboard",
    description="Influencer seeding campaign tracking backend",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/healthz")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "seedboard"}


@app.get("/readyz")
async def ready_check() -> Response:
    """Readiness check endpoint."""
    try:
        async with engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
    except Exception as e:
        logger.error("Readiness check failed: DB connection error", error=str(e))
        return JSONResponse({"status": "not_ready", "checks": {"database": False}}, status_code=503)

    return JSONResponse({"status": "ready"})


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seedboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
