"""
Custom application exceptions.

Centralised exception definitions for clean error handling
across all layers of the application.
"""


class DurableLinkServiceError(Exception):
    """Base exception for the durable link service."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class InvalidHostError(DurableLinkServiceError):
    """Raised when the short link host cannot be parsed."""

    def __init__(self, host: str, reason: str = "Invalid host"):
        self.host = host
        self.reason = reason
        super().__init__(f"invalid host '{host}': {reason}")


class MissingHostError(InvalidHostError):
    """Raised when the host is empty after trimming."""

    def __init__(self, host: str = ""):
        super().__init__(host, "host is required")


class DomainNotAllowedError(DurableLinkServiceError):
    """Raised when the target link's host is not in the allow-list."""

    def __init__(self, link: str):
        self.link = link
        super().__init__(f"domain link not in allow list: '{link}'")


class InvalidURLFormatError(DurableLinkServiceError):
    """Raised when a URL cannot be parsed."""

    def __init__(self, url: str, reason: str = "invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: '{url}'")


class InvalidSchemeError(InvalidURLFormatError):
    """Raised when a link uses a scheme other than http or https."""

    def __init__(self, url: str):
        super().__init__(
            url, "link has invalid scheme. Must have schemes [http https]"
        )


class MissingLinkError(InvalidURLFormatError):
    """Raised when a creation request carries no target link."""

    def __init__(self):
        super().__init__("", "link is required")


class InvalidAppStoreIdError(DurableLinkServiceError):
    """Raised when an iOS App Store ID is not a non-negative integer."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid iOS App Store ID: '{value}'")


class InvalidRequestError(DurableLinkServiceError):
    """
    Raised when a creation payload does not match the request schema.

    `errors` holds one dict per offending field (field, message).
    """

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        message = errors[0]["message"] if errors else "validation failed"
        super().__init__(message)


class InvalidPathFormatError(DurableLinkServiceError):
    """Raised when a short link path is not exactly one segment."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"unexpected path format '{path}': path must contain exactly one segment"
        )


class InvalidRequestedLinkError(DurableLinkServiceError):
    """Raised when a short link to resolve cannot be parsed."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"invalid requested link: '{url}'")


class LinkNotFoundError(DurableLinkServiceError):
    """Raised when no stored link matches a lookup."""

    def __init__(self, host: str, path: str = ""):
        self.host = host
        self.path = path
        target = f"{host}/{path}" if path else host
        super().__init__(f"link not found: '{target}'")


class StorageError(DurableLinkServiceError):
    """Raised when a database operation fails."""

    def __init__(self, operation: str, reason: str = "Unknown error"):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Database error during '{operation}': {reason}")


class DuplicateLinkError(StorageError):
    """
    Unique-constraint violation on insert.

    Either the (tenant, host, path) triple is taken, or an identical
    reusable short link was stored concurrently.
    """

    def __init__(self, host: str, path: str):
        self.host = host
        self.path = path
        super().__init__("insert_link", f"duplicate key for '{host}/{path}'")
