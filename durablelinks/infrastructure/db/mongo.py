"""
MongoDB client lifecycle management.

Provides async connection with retry-backoff, graceful shutdown,
and the unique indexes the durable link collection relies on.
"""

import asyncio
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from durablelinks.core.config import settings
from durablelinks.core.logging import get_logger

logger = get_logger(__name__)

LINKS_COLLECTION = "durable_links"

_client: AsyncIOMotorClient | None = None
_database: AsyncIOMotorDatabase | None = None


async def connect_to_mongo(
    max_retries: int = 5, base_delay: float = 1.0
) -> None:
    """
    Open the MongoDB connection, backing off exponentially between attempts.

    Raises:
        ConnectionFailure: If all retries are exhausted.
    """
    global _client, _database

    for attempt in range(1, max_retries + 1):
        try:
            logger.info("Connecting to MongoDB (attempt %d/%d)", attempt, max_retries)
            _client = AsyncIOMotorClient(
                settings.mongo_uri,
                serverSelectionTimeoutMS=5000,
            )
            await _client.admin.command("ping")
            _database = _client[settings.mongo_db_name]
            logger.info("MongoDB connected (db=%s)", settings.mongo_db_name)
            return

        except (ConnectionFailure, ServerSelectionTimeoutError) as exc:
            if attempt == max_retries:
                logger.error("Giving up on MongoDB after %d attempts", max_retries)
                raise ConnectionFailure(
                    f"Could not connect to MongoDB after {max_retries} attempts"
                ) from exc

            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(
                "MongoDB attempt %d failed: %s. Retrying in %.1fs",
                attempt,
                exc,
                delay,
            )
            await asyncio.sleep(delay)


async def close_mongo() -> None:
    global _client, _database

    if _client is not None:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def get_database() -> AsyncIOMotorDatabase:
    """
    Return the active database handle.

    Raises:
        RuntimeError: If called before connect_to_mongo().
    """
    if _database is None:
        raise RuntimeError(
            "MongoDB is not connected. Ensure connect_to_mongo() "
            "has been called during application startup."
        )
    return _database


async def ensure_indexes() -> None:
    """
    Create the durable link indexes.

    - Unique (tenant_id, host, path): one link per short URL. A missing
      tenant_id is indexed as null, so single-tenant links share one
      namespace.
    - Partial unique (tenant_id, host, link, params_hash) over guessable
      paths only: at most one reusable short link per description.
      Unguessable paths are excluded and may repeat a description.
    """
    collection = get_database()[LINKS_COLLECTION]

    await collection.create_index(
        [("tenant_id", ASCENDING), ("host", ASCENDING), ("path", ASCENDING)],
        unique=True,
        name="idx_tenant_host_path_unique",
    )
    await collection.create_index(
        [
            ("tenant_id", ASCENDING),
            ("host", ASCENDING),
            ("link", ASCENDING),
            ("params_hash", ASCENDING),
        ],
        unique=True,
        partialFilterExpression={"is_unguessable_path": False},
        name="idx_reusable_short_link_unique",
    )
    logger.info("Database indexes ensured on '%s' collection", LINKS_COLLECTION)
