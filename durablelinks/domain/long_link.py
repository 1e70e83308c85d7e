"""
Long durable link codec.

A long durable link carries the whole link description in its query
string, e.g.

    https://acme.short.link/?link=https://acme.com/item&apn=com.acme&isi=123

Creation requests may be submitted in this form, and resolved short
links are reported back in it.
"""

from urllib.parse import parse_qs, urlencode

from durablelinks.core.exceptions import InvalidAppStoreIdError, InvalidHostError
from durablelinks.core.logging import get_logger
from durablelinks.domain.models import (
    MAX_APP_STORE_ID,
    CreateDurableLinkRequest,
    DurableLink,
    Suffix,
)
from durablelinks.utils.url_utils import parse_url

logger = get_logger(__name__)

# Query key → (parameter group, field). `link`, `isi` and `path` are special.
LONG_LINK_PARAMETERS = {
    "apn": ("android_parameters", "android_package_name"),
    "afl": ("android_parameters", "android_fallback_link"),
    "amv": ("android_parameters", "android_min_package_version_code"),
    "ifl": ("ios_parameters", "ios_fallback_link"),
    "ipfl": ("ios_parameters", "ios_ipad_fallback_link"),
    "ofl": ("other_platform_parameters", "fallback_url"),
    "st": ("social_meta_tag_info", "social_title"),
    "sd": ("social_meta_tag_info", "social_description"),
    "si": ("social_meta_tag_info", "social_image_link"),
    "utm_source": ("analytics_info.marketing_parameters", "utm_source"),
    "utm_medium": ("analytics_info.marketing_parameters", "utm_medium"),
    "utm_campaign": ("analytics_info.marketing_parameters", "utm_campaign"),
    "utm_term": ("analytics_info.marketing_parameters", "utm_term"),
    "utm_content": ("analytics_info.marketing_parameters", "utm_content"),
    "pt": ("analytics_info.itunes_connect_analytics", "pt"),
    "at": ("analytics_info.itunes_connect_analytics", "at"),
    "ct": ("analytics_info.itunes_connect_analytics", "ct"),
    "mt": ("analytics_info.itunes_connect_analytics", "mt"),
}


def _group(durable_link: DurableLink, path: str):
    target = durable_link
    for attr in path.split("."):
        target = getattr(target, attr)
    return target


def parse_long_durable_link(long_link: str) -> CreateDurableLinkRequest:
    """
    Parse a long durable link into a creation request.

    Raises:
        InvalidURLFormatError: If the URL cannot be parsed.
        InvalidHostError: If the URL has no host.
        InvalidAppStoreIdError: If `isi` is not an integer in
            [0, MAX_APP_STORE_ID].
    """
    logger.debug("Parsing long durable link=%s", long_link)

    parts = parse_url(long_link)
    if not parts.netloc:
        raise InvalidHostError(long_link, "long durable link has no host")

    params = parse_qs(parts.query, keep_blank_values=True)

    def first(key: str):
        values = params.get(key)
        return values[0] if values else None

    durable_link = DurableLink(host=parts.netloc, link=first("link") or "")

    for key, (group_path, field_name) in LONG_LINK_PARAMETERS.items():
        value = first(key)
        if value is not None:
            setattr(_group(durable_link, group_path), field_name, value)

    isi = first("isi")
    if isi:
        if not (isi.isascii() and isi.isdigit()):
            raise InvalidAppStoreIdError(isi)
        digits = isi.lstrip("0") or "0"
        if len(digits) > len(str(MAX_APP_STORE_ID)) or int(digits) > MAX_APP_STORE_ID:
            raise InvalidAppStoreIdError(isi)
        durable_link.ios_parameters.ios_app_store_id = int(digits)

    return CreateDurableLinkRequest(
        durable_link_info=durable_link,
        suffix=Suffix(option=first("path") or ""),
    )


def build_long_durable_link(scheme: str, host: str, durable_link: DurableLink) -> str:
    """Encode a durable link as a long durable link. Absent fields are omitted."""
    query = [("link", durable_link.link)]

    isi = durable_link.ios_parameters.ios_app_store_id
    if isi is not None:
        query.append(("isi", str(isi)))

    for key, (group_path, field_name) in LONG_LINK_PARAMETERS.items():
        value = getattr(_group(durable_link, group_path), field_name)
        if value is not None:
            query.append((key, value))

    return f"{scheme}://{host}/?{urlencode(query)}"
