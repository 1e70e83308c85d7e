"""
Durable link repository: MongoDB storage gateway.

All database interactions for link records go through this module.
Uses Motor async driver for non-blocking I/O. Lookups that find
nothing raise LinkNotFoundError; driver failures are wrapped in
StorageError naming the operation.
"""

from datetime import datetime, timezone
from typing import Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from durablelinks.core.exceptions import (
    DuplicateLinkError,
    LinkNotFoundError,
    StorageError,
)
from durablelinks.core.logging import get_logger
from durablelinks.domain.models import StoredLink
from durablelinks.domain.params_hash import compute_params_hash
from durablelinks.infrastructure.db.mongo import LINKS_COLLECTION, get_database

logger = get_logger(__name__)


class DurableLinkRepository:
    """Async repository for durable link documents in MongoDB."""

    COLLECTION_NAME = LINKS_COLLECTION

    def _get_collection(self):
        """Return the durable links collection handle."""
        return get_database()[self.COLLECTION_NAME]

    async def lookup_by_host_and_path(
        self, host: str, path: str, tenant_id: Optional[str] = None
    ) -> StoredLink:
        """
        Fetch the link stored under a short URL.

        Without a tenant_id the lookup spans all tenants.

        Raises:
            LinkNotFoundError: If no link is stored under (host, path).
            StorageError: If the database call fails.
        """
        query = {"host": host, "path": path}
        if tenant_id is not None:
            query["tenant_id"] = tenant_id

        try:
            document = await self._get_collection().find_one(query)
        except PyMongoError as exc:
            logger.error("Lookup failed for host=%s path=%s: %s", host, path, exc)
            raise StorageError("lookup_by_host_and_path", str(exc)) from exc

        if document is None:
            logger.debug("Link not found for host=%s path=%s", host, path)
            raise LinkNotFoundError(host, path)

        stored = StoredLink.from_mongo(document)
        if stored.params_hash != compute_params_hash(stored.optional_parameters()):
            logger.warning(
                "Stored params_hash does not match parameters for host=%s path=%s",
                host,
                path,
            )
        return stored

    async def find_reusable_short_link(
        self,
        host: str,
        link: str,
        params_hash: str,
        tenant_id: Optional[str] = None,
    ) -> str:
        """
        Find the path of an existing guessable link with the same description.

        Unguessable links are never returned. A missing tenant_id matches
        only links stored without one.

        Raises:
            LinkNotFoundError: If no reusable link exists.
            StorageError: If the database call fails.
        """
        query = {
            "tenant_id": tenant_id,
            "host": host,
            "link": link,
            "params_hash": params_hash,
            "is_unguessable_path": False,
        }

        try:
            document = await self._get_collection().find_one(query, {"path": 1})
        except PyMongoError as exc:
            logger.error("Reusable link query failed for host=%s: %s", host, exc)
            raise StorageError("find_reusable_short_link", str(exc)) from exc

        if document is None:
            raise LinkNotFoundError(host)
        return document["path"]

    async def insert(self, stored_link: StoredLink) -> str:
        """
        Insert a new link record.

        The params_hash is recomputed from the record's parameters and
        must match the one supplied.

        Returns:
            The string representation of the document's _id.

        Raises:
            DuplicateLinkError: On a unique index violation.
            StorageError: On a hash mismatch or any other database failure.
        """
        expected_hash = compute_params_hash(stored_link.optional_parameters())
        if stored_link.params_hash != expected_hash:
            raise StorageError(
                "insert_link", "params_hash does not match the link parameters"
            )

        now = datetime.now(timezone.utc)
        document = stored_link.to_mongo()
        document["created_at"] = now
        document["updated_at"] = now

        try:
            result = await self._get_collection().insert_one(document)
        except DuplicateKeyError as exc:
            logger.warning(
                "Duplicate key inserting host=%s path=%s",
                stored_link.host,
                stored_link.path,
            )
            raise DuplicateLinkError(stored_link.host, stored_link.path) from exc
        except PyMongoError as exc:
            logger.error(
                "Insert failed for host=%s path=%s: %s",
                stored_link.host,
                stored_link.path,
                exc,
            )
            raise StorageError("insert_link", str(exc)) from exc

        logger.info(
            "Stored link host=%s path=%s (id=%s)",
            stored_link.host,
            stored_link.path,
            result.inserted_id,
        )
        return str(result.inserted_id)
