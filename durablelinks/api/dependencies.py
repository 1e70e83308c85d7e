"""
FastAPI dependency injection.

Provides shared instances for use across API endpoints,
ensuring consistent lifecycle management and testability.
"""

from durablelinks.core.config import settings
from durablelinks.domain.link_service import DurableLinkService
from durablelinks.domain.normalizer import LinkNormalizer
from durablelinks.infrastructure.db.repository import DurableLinkRepository


def get_link_service() -> DurableLinkService:
    """
    Provide a DurableLinkService wired to MongoDB and the configured tenant.

    Registered as a FastAPI dependency so endpoints receive a
    fully-wired service without coupling to infrastructure details.
    """
    return DurableLinkService(
        repository=DurableLinkRepository(),
        normalizer=LinkNormalizer(),
        tenant=settings.tenant_config(),
        max_path_attempts=settings.max_path_attempts,
    )
