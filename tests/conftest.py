"""
Shared test fixtures for the durable link service test suite.

Provides:
  - Async test client for FastAPI integration tests
  - An in-memory repository enforcing the MongoDB unique indexes
  - Mock repository and sample document fixtures
"""

from datetime import datetime, timezone
from typing import AsyncIterator, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from durablelinks.api.dependencies import get_link_service
from durablelinks.core.exceptions import DuplicateLinkError, LinkNotFoundError
from durablelinks.domain.link_service import DurableLinkService
from durablelinks.domain.models import OPTIONAL_PARAMETER_FIELDS, StoredLink, TenantConfig
from durablelinks.domain.normalizer import LinkNormalizer
from durablelinks.domain.params_hash import compute_params_hash
from durablelinks.main import app


class InMemoryLinkRepository:
    """Dict-backed stand-in for DurableLinkRepository with the same constraints."""

    def __init__(self) -> None:
        self.links: list[StoredLink] = []

    async def lookup_by_host_and_path(
        self, host: str, path: str, tenant_id: Optional[str] = None
    ) -> StoredLink:
        for stored in self.links:
            if stored.host == host and stored.path == path and (
                tenant_id is None or stored.tenant_id == tenant_id
            ):
                return stored
        raise LinkNotFoundError(host, path)

    async def find_reusable_short_link(
        self,
        host: str,
        link: str,
        params_hash: str,
        tenant_id: Optional[str] = None,
    ) -> str:
        for stored in self.links:
            if (
                not stored.is_unguessable_path
                and stored.tenant_id == tenant_id
                and stored.host == host
                and stored.link == link
                and stored.params_hash == params_hash
            ):
                return stored.path
        raise LinkNotFoundError(host)

    async def insert(self, stored_link: StoredLink) -> str:
        for stored in self.links:
            same_path = (
                stored.tenant_id == stored_link.tenant_id
                and stored.host == stored_link.host
                and stored.path == stored_link.path
            )
            same_short_link = (
                not stored.is_unguessable_path
                and not stored_link.is_unguessable_path
                and stored.tenant_id == stored_link.tenant_id
                and stored.host == stored_link.host
                and stored.link == stored_link.link
                and stored.params_hash == stored_link.params_hash
            )
            if same_path or same_short_link:
                raise DuplicateLinkError(stored_link.host, stored_link.path)

        now = datetime.now(timezone.utc)
        record = stored_link.model_copy(
            update={"id": str(len(self.links) + 1), "created_at": now, "updated_at": now}
        )
        self.links.append(record)
        return record.id


@pytest.fixture
def tenant_config() -> TenantConfig:
    return TenantConfig(
        url_scheme="https",
        domain_allow_list=["example.com"],
        short_path_length=8,
        unguessable_path_length=17,
    )


@pytest.fixture
def memory_repository() -> InMemoryLinkRepository:
    return InMemoryLinkRepository()


@pytest.fixture
def link_service(memory_repository, tenant_config) -> DurableLinkService:
    """A DurableLinkService backed by the in-memory repository."""
    return DurableLinkService(
        repository=memory_repository,
        normalizer=LinkNormalizer(),
        tenant=tenant_config,
    )


@pytest.fixture
def mock_repository():
    """
    Provide a mock DurableLinkRepository.

    Pre-configured with async methods for use in unit tests: no
    reusable link exists and inserts succeed.
    """
    repo = MagicMock()
    repo.lookup_by_host_and_path = AsyncMock(
        side_effect=LinkNotFoundError("example.com", "missing")
    )
    repo.find_reusable_short_link = AsyncMock(
        side_effect=LinkNotFoundError("example.com")
    )
    repo.insert = AsyncMock(return_value="mock_id_123")
    return repo


@pytest_asyncio.fixture
async def async_client(link_service) -> AsyncIterator[AsyncClient]:
    """
    Provide an async HTTP test client for integration tests.

    Patches the MongoDB lifecycle and wires the routes to the
    in-memory link service.
    """
    app.dependency_overrides[get_link_service] = lambda: link_service

    with patch("durablelinks.core.lifespan.connect_to_mongo", new_callable=AsyncMock), \
         patch("durablelinks.core.lifespan.close_mongo", new_callable=AsyncMock), \
         patch("durablelinks.core.lifespan.ensure_indexes", new_callable=AsyncMock):

        transport = ASGITransport(app=app)
        async with AsyncClient(
            transport=transport, base_url="http://testserver"
        ) as client:
            yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_link_doc():
    """Provide a sample MongoDB durable link document with a matching params_hash."""
    doc = {
        "_id": "64f1a2b3c4d5e6f7a8b9c0d1",
        "host": "example.com",
        "path": "abc123",
        "link": "https://example.com/target",
        "is_unguessable_path": False,
        "tenant_id": None,
        "android_package_name": "com.example.app",
        "ios_app_store_id": 123456789,
        "utm_source": "newsletter",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    doc["params_hash"] = compute_params_hash(
        {name: doc.get(name) for name in OPTIONAL_PARAMETER_FIELDS}
    )
    return doc
