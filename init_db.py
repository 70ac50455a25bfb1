#!/usr/bin/env python3
"""Database initialization script for local development."""

import asyncio
from urllib.parse import urlparse, urlunparse

from seedboard.logging_config import setup_logging

setup_logging()

import structlog

from seedboard.config import settings
from seedboard.db import close_db, create_tables, init_db

logger = structlog.get_logger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask the password in the database URL for logging."""
    parsed = urlparse(url)
    netloc = parsed.netloc
    if parsed.password:
        netloc = netloc.replace(parsed.password, "***")
    return urlunparse(parsed._replace(netloc=netloc))


async def initialize_database() -> None:
    logger.info("🔧 Initializing seeding database")
    try:
        await init_db()
        await create_tables()
        logger.info("✅ Seeding tables ready")
    except Exception as exc:
        logger.error("❌ Database initialization failed", error=str(exc), exc_info=True)
        raise SystemExit(1) from exc
    finally:
        await close_db()


if __name__ == "__main__":
    logger.info("🚀 Starting database initialization", database_url=_mask_database_url(settings.database_url))
    asyncio.run(initialize_database())
