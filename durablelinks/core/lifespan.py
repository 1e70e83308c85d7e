"""
FastAPI application lifespan management.

Handles startup and shutdown of all long-lived resources:
  - Logging setup
  - MongoDB connection
  - Database indexes
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from durablelinks.core.logging import setup_logging, get_logger
from durablelinks.infrastructure.db.mongo import (
    connect_to_mongo,
    close_mongo,
    ensure_indexes,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Manage application lifecycle.

    Startup: configure logging, connect to MongoDB, ensure the unique
    indexes link deduplication depends on.
    Shutdown: close the MongoDB connection.
    """
    setup_logging()
    logger.info("Starting durable link service...")

    await connect_to_mongo()
    await ensure_indexes()
    logger.info("MongoDB connected and indexes ensured")

    yield

    logger.info("Shutting down durable link service...")
    await close_mongo()
    logger.info("Shutdown complete")
