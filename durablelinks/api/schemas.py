"""
API request/response schemas.

These Pydantic models define the contract between the API layer
and external clients. They are separate from domain models to
allow the API surface to evolve independently.
"""

from pydantic import Field

from durablelinks.domain.models import CamelModel, DurableLink, LinkWarning


class ExchangeShortLinkRequest(CamelModel):
    """Request body for POST /exchangeShortLink."""

    requested_link: str = Field(
        ...,
        description="The short link to resolve",
        json_schema_extra={"example": "https://acme.short.link/abc123"},
    )


class ShortLinkResponse(CamelModel):
    """Response returned when a short link is created or reused."""

    short_link: str = Field(..., description="The short link")
    warnings: list[LinkWarning] = Field(
        default_factory=list,
        description="Non-fatal problems found in the request",
    )


class LongLinkResponse(CamelModel):
    """Response returned when a short link is resolved."""

    long_link: str = Field(
        ..., description="The long durable link, parameters in the query string"
    )
    durable_link_info: DurableLink = Field(
        ..., description="The stored link description"
    )


class ErrorResponse(CamelModel):
    """Standard error response."""

    detail: str = Field(..., description="Error description")
