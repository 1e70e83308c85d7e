"""
FastAPI application entrypoint.

Builds the durable link API: lifespan (MongoDB, indexes), the link
routes under /api/v1, CORS, a health check and fallback exception
handlers that map service errors onto HTTP statuses.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from durablelinks.api.routes import router as links_router
from durablelinks.core.config import settings
from durablelinks.core.exceptions import (
    DomainNotAllowedError,
    DurableLinkServiceError,
    InvalidAppStoreIdError,
    InvalidHostError,
    InvalidPathFormatError,
    InvalidRequestedLinkError,
    InvalidRequestError,
    InvalidURLFormatError,
    LinkNotFoundError,
)
from durablelinks.core.lifespan import lifespan
from durablelinks.core.logging import get_logger

logger = get_logger(__name__)

ERROR_STATUS = {
    InvalidHostError: status.HTTP_400_BAD_REQUEST,
    InvalidURLFormatError: status.HTTP_400_BAD_REQUEST,
    InvalidAppStoreIdError: status.HTTP_400_BAD_REQUEST,
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    InvalidPathFormatError: status.HTTP_400_BAD_REQUEST,
    InvalidRequestedLinkError: status.HTTP_400_BAD_REQUEST,
    DomainNotAllowedError: status.HTTP_403_FORBIDDEN,
    LinkNotFoundError: status.HTTP_404_NOT_FOUND,
}


def status_for(exc: DurableLinkServiceError) -> int:
    """HTTP status for a service error; storage and unknown errors are 500."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app() -> FastAPI:
    application = FastAPI(
        title="Durable Links Service",
        description=(
            "Creates short links for deep-link descriptions (target link, "
            "platform fallbacks, analytics tags) and resolves them back. "
            "Identical SHORT links are deduplicated by a parameter hash."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Middleware ────────────────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # ── Routes ───────────────────────────────────────────────
    application.include_router(links_router, prefix="/api/v1")

    @application.get(
        "/health",
        tags=["Health"],
        summary="Service health check",
        status_code=status.HTTP_200_OK,
    )
    async def health_check():
        return {"status": "healthy", "service": "durable-links"}

    # ── Exception Handlers ───────────────────────────────────
    @application.exception_handler(DurableLinkServiceError)
    async def durable_link_error_handler(
        request: Request, exc: DurableLinkServiceError
    ):
        """Service errors that escape a route handler."""
        code = status_for(exc)
        if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Unhandled service error on %s: %s", request.url.path, exc.message)
        return JSONResponse(status_code=code, content={"detail": exc.message})

    @application.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Catch-all handler to prevent stack traces from leaking to clients."""
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An internal server error occurred."},
        )

    return application


# Referenced by uvicorn as durablelinks.main:app
app = create_app()
