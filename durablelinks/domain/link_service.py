"""
Durable link service: core business logic.

Orchestrates creation and resolution of durable links. This layer is
framework-agnostic and depends only on the repository abstraction and
the injected normaliser.

Creation:
  1. Normalise the request (tenant defaults, warnings)
  2. Hash the optional parameters
  3. SHORT: reuse an identical guessable link if one exists
  4. Otherwise generate a random path and insert a new record

Resolution:
  1. Parse the short URL and strip preview hosts
  2. Require a single path segment
  3. Look the link up and rebuild its long form
"""

import secrets
import string
from typing import Any, Optional

from pydantic import ValidationError

from durablelinks.core.exceptions import (
    DuplicateLinkError,
    InvalidPathFormatError,
    InvalidRequestedLinkError,
    InvalidRequestError,
    InvalidURLFormatError,
    LinkNotFoundError,
    MissingHostError,
    MissingLinkError,
    StorageError,
)
from durablelinks.core.logging import get_logger
from durablelinks.domain.long_link import build_long_durable_link, parse_long_durable_link
from durablelinks.domain.models import (
    CreateDurableLinkRequest,
    CreationOutcome,
    LongLink,
    NormalizedLink,
    ShortLink,
    StoredLink,
    TenantConfig,
)
from durablelinks.domain.normalizer import LinkNormalizer
from durablelinks.domain.params_hash import compute_params_hash
from durablelinks.infrastructure.db.repository import DurableLinkRepository
from durablelinks.utils.url_utils import parse_url, remove_preview, validate_scheme

logger = get_logger(__name__)

PATH_ALPHABET = string.ascii_letters + string.digits


def generate_path(length: int) -> str:
    """Return a random path of `length` characters from [a-zA-Z0-9]."""
    path = "".join(secrets.choice(PATH_ALPHABET) for _ in range(length))
    logger.debug("Generated path=%s", path)
    return path


class DurableLinkService:
    """Business logic for durable link operations."""

    def __init__(
        self,
        repository: DurableLinkRepository,
        normalizer: LinkNormalizer,
        tenant: TenantConfig,
        max_path_attempts: int = 3,
    ) -> None:
        self._repo = repository
        self._normalizer = normalizer
        self._tenant = tenant
        self._max_path_attempts = max_path_attempts

    def prepare_request(self, payload: dict[str, Any]) -> CreateDurableLinkRequest:
        """
        Build a creation request from a raw JSON payload.

        The payload is either a structured request
        (`{"durableLinkInfo": ..., "suffix": ...}`) or
        `{"longDurableLink": "https://host/?link=..."}`.

        Raises:
            InvalidRequestError: If the structured payload does not validate.
            MissingHostError: If no host is given.
            MissingLinkError: If no target link is given.
            InvalidURLFormatError: If the long link or target link is
                unparsable or not http(s).
            InvalidAppStoreIdError: If a long link carries a bad `isi`.
        """
        long_link = payload.get("longDurableLink")
        if isinstance(long_link, str) and long_link:
            request = parse_long_durable_link(long_link)
        else:
            try:
                request = CreateDurableLinkRequest.model_validate(payload)
            except ValidationError as exc:
                raise InvalidRequestError(
                    [
                        {
                            "field": ".".join(str(part) for part in error["loc"]),
                            "message": error["msg"],
                        }
                        for error in exc.errors()
                    ]
                ) from exc

        if not request.durable_link_info.host:
            raise MissingHostError()
        if not request.durable_link_info.link:
            raise MissingLinkError()
        validate_scheme(request.durable_link_info.link)

        return request

    async def create_durable_link(
        self, request: CreateDurableLinkRequest, tenant_id: Optional[str] = None
    ) -> ShortLink:
        """
        Create a short link, or reuse an identical SHORT one.

        Args:
            request: The creation request.
            tenant_id: Owning tenant, if the deployment is multi-tenant.

        Returns:
            The short link, its path, whether it was created or reused,
            and the normalisation warnings.

        Raises:
            InvalidHostError, InvalidURLFormatError, DomainNotAllowedError:
                On invalid required fields; nothing is written.
            StorageError: If the database fails or no free path is found.
        """
        normalized = self._normalizer.normalize(request, self._tenant)
        params_hash = compute_params_hash(normalized.durable_link.optional_parameters())

        path, outcome = await self._resolve_or_create(normalized, params_hash, tenant_id)
        short_link = f"{self._tenant.url_scheme}://{normalized.host}/{path}"

        logger.info(
            "Short link %s: %s (warnings=%d)",
            outcome.value,
            short_link,
            len(normalized.warnings),
        )
        return ShortLink(
            short_link=short_link,
            path=path,
            outcome=outcome,
            warnings=normalized.warnings,
        )

    async def _resolve_or_create(
        self,
        normalized: NormalizedLink,
        params_hash: str,
        tenant_id: Optional[str],
    ) -> tuple[str, CreationOutcome]:
        if normalized.wants_short_path:
            existing = await self._find_reusable(normalized, params_hash, tenant_id)
            if existing is not None:
                return existing, CreationOutcome.REUSED

        length = (
            self._tenant.short_path_length
            if normalized.wants_short_path
            else self._tenant.unguessable_path_length
        )

        for attempt in range(1, self._max_path_attempts + 1):
            path = generate_path(length)
            stored = StoredLink.from_durable_link(
                normalized.durable_link,
                host=normalized.host,
                path=path,
                is_unguessable_path=not normalized.wants_short_path,
                tenant_id=tenant_id,
            )
            stored.params_hash = params_hash

            try:
                await self._repo.insert(stored)
                return path, CreationOutcome.CREATED
            except DuplicateLinkError:
                if normalized.wants_short_path:
                    # An identical request may have been stored concurrently
                    existing = await self._find_reusable(normalized, params_hash, tenant_id)
                    if existing is not None:
                        return existing, CreationOutcome.REUSED

                logger.warning(
                    "Path collision for host=%s (attempt %d/%d)",
                    normalized.host,
                    attempt,
                    self._max_path_attempts,
                )

        raise StorageError(
            "insert_link",
            f"no free path after {self._max_path_attempts} attempts",
        )

    async def _find_reusable(
        self,
        normalized: NormalizedLink,
        params_hash: str,
        tenant_id: Optional[str],
    ) -> Optional[str]:
        try:
            path = await self._repo.find_reusable_short_link(
                normalized.host,
                normalized.durable_link.link,
                params_hash,
                tenant_id,
            )
        except LinkNotFoundError:
            return None

        logger.debug("Re-using existing short link path=%s", path)
        return path

    async def resolve_short_link(
        self, raw_url: str, tenant_id: Optional[str] = None
    ) -> LongLink:
        """
        Resolve a short link to the durable link stored behind it.

        Preview hosts (`preview.acme.link`, `acme-preview.link`) resolve
        against their production host.

        Raises:
            InvalidRequestedLinkError: If the URL cannot be parsed.
            InvalidPathFormatError: Unless the path is exactly one segment.
            LinkNotFoundError: If nothing is stored under the short link.
            StorageError: If the database call fails.
        """
        try:
            parts = parse_url(raw_url)
        except InvalidURLFormatError as exc:
            raise InvalidRequestedLinkError(raw_url) from exc

        if not parts.hostname:
            raise InvalidRequestedLinkError(raw_url)

        host = remove_preview(parts.hostname)

        segments = parts.path.strip("/").split("/")
        if len(segments) != 1 or not segments[0]:
            raise InvalidPathFormatError(parts.path)
        path = segments[0]

        stored = await self._repo.lookup_by_host_and_path(host, path, tenant_id)
        durable_link = stored.to_durable_link()
        long_link = build_long_durable_link(self._tenant.url_scheme, host, durable_link)

        logger.info("Resolved host=%s path=%s to %s", host, path, long_link)
        return LongLink(long_link=long_link, durable_link=durable_link)
