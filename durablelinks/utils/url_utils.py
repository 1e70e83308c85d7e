"""
URL and host utilities.

Small, pure helpers shared by link normalisation and short link
resolution:
  - strict URL parsing (rejects control characters, and spaces in the
    authority)
  - scheme validation and advisory well-formedness checks
  - host cleaning and allow-list membership
  - preview host stripping
"""

import re
from urllib.parse import SplitResult, urlsplit

from durablelinks.core.exceptions import (
    InvalidHostError,
    InvalidSchemeError,
    InvalidURLFormatError,
    MissingHostError,
)
from durablelinks.core.logging import get_logger

logger = get_logger(__name__)

VALID_SCHEMES = ("http", "https")

PREVIEW_PREFIX = "preview."
PREVIEW_LABEL_SUFFIX = "-preview"

_FORBIDDEN_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def parse_url(raw: str) -> SplitResult:
    """
    Split a URL, rejecting input a strict parser would refuse.

    Raises:
        InvalidURLFormatError: On control characters, a space in the
            netloc, a malformed netloc or port, or a scheme-less first path
            segment containing a colon.
    """
    if _FORBIDDEN_CHARS.search(raw):
        raise InvalidURLFormatError(raw, "invalid character in URL")

    try:
        parts = urlsplit(raw)
        # Accessing .port validates it
        parts.port
    except ValueError as exc:
        raise InvalidURLFormatError(raw, str(exc)) from exc

    if " " in parts.netloc:
        raise InvalidURLFormatError(raw, "invalid character \" \" in host name")

    if not parts.scheme and ":" in parts.path.split("/", 1)[0]:
        raise InvalidURLFormatError(
            raw, "first path segment in URL cannot contain colon"
        )

    return parts


def validate_scheme(url: str) -> None:
    """
    Ensure a URL parses and uses http or https.

    Raises:
        InvalidURLFormatError: If the URL cannot be parsed.
        InvalidSchemeError: If the scheme is anything else.
    """
    parts = parse_url(url)
    if parts.scheme not in VALID_SCHEMES:
        raise InvalidSchemeError(url)


def is_well_formed_url(value: str) -> bool:
    """Return True if the value parses with a non-empty scheme and host."""
    try:
        parts = parse_url(value)
    except InvalidURLFormatError:
        return False
    host = parts.netloc.rpartition("@")[2]
    return bool(parts.scheme) and bool(host)


def clean_host(raw: str) -> str:
    """
    Reduce a host as typed by a caller to a bare hostname.

    `https://` is assumed when no scheme is present; port, path and
    query are discarded. Cleaning an already clean host returns it
    unchanged.

    Raises:
        MissingHostError: If the host is empty after trimming.
        InvalidHostError: If the host cannot be parsed.
    """
    raw = raw.strip()
    if not raw:
        raise MissingHostError()

    if "://" not in raw:
        raw = f"https://{raw}"

    try:
        parts = parse_url(raw)
    except InvalidURLFormatError as exc:
        raise InvalidHostError(raw, exc.reason) from exc

    host = parts.hostname or ""
    if not host:
        raise InvalidHostError(raw, "no hostname")

    logger.debug("Cleaned host=%s", host)
    return host


def is_domain_allowed(allow_list: list[str], candidate_url: str) -> bool:
    """
    Check the candidate URL's hostname against the allow-list.

    Matching is exact and case-insensitive; subdomains of an allowed
    host are not allowed unless listed themselves.
    """
    try:
        parts = parse_url(candidate_url)
    except InvalidURLFormatError:
        logger.error("Invalid link=%s", candidate_url)
        return False

    host = (parts.hostname or "").lower()
    for allowed in allow_list:
        if host == allowed.strip().lower():
            return True
    return False


def remove_preview(host: str) -> str:
    """
    Map a preview host onto its production host.

    preview.acme.short.link  →  acme.short.link
    acme-preview.short.link  →  acme.short.link
    """
    if host.startswith(PREVIEW_PREFIX):
        return host[len(PREVIEW_PREFIX):]

    label, dot, rest = host.partition(".")
    if dot and label.endswith(PREVIEW_LABEL_SUFFIX):
        return f"{label[:-len(PREVIEW_LABEL_SUFFIX)]}.{rest}"

    return host
