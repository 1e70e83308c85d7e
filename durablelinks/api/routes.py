"""
API routes for the durable link service.

Defines the endpoints for creating short links and exchanging them
back for long links. Uses FastAPI dependency injection for clean
separation from business logic.
"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, HTTPException, status

from durablelinks.api.dependencies import get_link_service
from durablelinks.api.schemas import (
    ErrorResponse,
    ExchangeShortLinkRequest,
    LongLinkResponse,
    ShortLinkResponse,
)
from durablelinks.core.exceptions import (
    DomainNotAllowedError,
    InvalidAppStoreIdError,
    InvalidHostError,
    InvalidPathFormatError,
    InvalidRequestedLinkError,
    InvalidRequestError,
    InvalidURLFormatError,
    LinkNotFoundError,
    StorageError,
)
from durablelinks.core.logging import get_logger
from durablelinks.domain.link_service import DurableLinkService

logger = get_logger(__name__)

router = APIRouter(tags=["Durable Links"])


def _tenant(x_tenant_id: Optional[UUID]) -> Optional[str]:
    return str(x_tenant_id) if x_tenant_id is not None else None


@router.post(
    "/shortLinks",
    response_model=ShortLinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short link",
    description=(
        "Creates a short link for a durable link description, given either "
        "as `durableLinkInfo` + `suffix` or as a `longDurableLink`. SHORT "
        "links with an identical description are reused."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        403: {"model": ErrorResponse, "description": "Domain not allowed"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
async def create_short_link(
    payload: dict[str, Any] = Body(...),
    x_tenant_id: Optional[UUID] = Header(default=None),
    service: DurableLinkService = Depends(get_link_service),
) -> ShortLinkResponse:
    """POST /shortLinks: create (or reuse) a short link."""
    try:
        request = service.prepare_request(payload)
        result = await service.create_durable_link(request, _tenant(x_tenant_id))
        return ShortLinkResponse(short_link=result.short_link, warnings=result.warnings)

    except DomainNotAllowedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=exc.message,
        ) from exc

    except (
        InvalidHostError,
        InvalidURLFormatError,
        InvalidAppStoreIdError,
        InvalidRequestError,
    ) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc

    except StorageError as exc:
        logger.error("Storage failure in create_short_link: %s", exc.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.message,
        ) from exc

    except Exception as exc:
        logger.error("Unexpected error in create_short_link: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while creating the short link.",
        ) from exc


@router.post(
    "/exchangeShortLink",
    response_model=LongLinkResponse,
    summary="Resolve a short link",
    description=(
        "Returns the long durable link stored behind a short link. Preview "
        "hosts resolve against their production host."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid short link"},
        404: {"model": ErrorResponse, "description": "Link not found"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
async def exchange_short_link(
    request: ExchangeShortLinkRequest,
    x_tenant_id: Optional[UUID] = Header(default=None),
    service: DurableLinkService = Depends(get_link_service),
) -> LongLinkResponse:
    """POST /exchangeShortLink: resolve a short link to its long form."""
    try:
        result = await service.resolve_short_link(
            request.requested_link, _tenant(x_tenant_id)
        )
        return LongLinkResponse(
            long_link=result.long_link,
            durable_link_info=result.durable_link,
        )

    except (InvalidRequestedLinkError, InvalidPathFormatError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc

    except LinkNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.message,
        ) from exc

    except StorageError as exc:
        logger.error("Storage failure in exchange_short_link: %s", exc.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.message,
        ) from exc

    except Exception as exc:
        logger.error("Unexpected error in exchange_short_link: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while resolving the short link.",
        ) from exc
