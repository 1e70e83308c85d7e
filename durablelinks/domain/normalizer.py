"""
Link normalisation and validation.

Turns a loosely specified creation request into a normalised durable
link plus an ordered list of warnings. Problems with required fields
(host, target link, allow-list) are fatal; problems with optional
fields are downgraded to warnings and the offending value is cleared.
"""

from durablelinks.core.exceptions import DomainNotAllowedError, MissingLinkError
from durablelinks.core.logging import get_logger
from durablelinks.domain.models import (
    CreateDurableLinkRequest,
    DurableLink,
    LinkWarning,
    NormalizedLink,
    SuffixOption,
    TenantConfig,
    WarningCode,
)
from durablelinks.utils.url_utils import (
    clean_host,
    is_domain_allowed,
    is_well_formed_url,
    validate_scheme,
)

logger = get_logger(__name__)

# (parameter group, field, wire name) of optional URL parameters
URL_PARAMETERS = (
    ("android_parameters", "android_fallback_link", "androidFallbackLink"),
    ("ios_parameters", "ios_fallback_link", "iosFallbackLink"),
    ("ios_parameters", "ios_ipad_fallback_link", "iosIpadFallbackLink"),
    ("other_platform_parameters", "fallback_url", "fallbackUrl"),
    ("social_meta_tag_info", "social_image_link", "socialImageLink"),
)


class LinkNormalizer:
    """Validates creation requests against a tenant configuration."""

    def normalize(
        self, request: CreateDurableLinkRequest, tenant: TenantConfig
    ) -> NormalizedLink:
        """
        Normalise a creation request.

        Steps, in order (warnings keep this order):
          1. Clean the host
          2. Validate the target link and check the domain allow-list
          3. Apply the tenant's default iOS App Store ID
          4. Apply the tenant's default Android package name
          5. Clear malformed optional URLs
          6. Flag iTunes Connect parameters that have no effect
          7. Resolve the suffix option

        Args:
            request: The creation request as received.
            tenant: The tenant whose defaults and allow-list apply.

        Returns:
            A NormalizedLink; the request itself is left untouched.

        Raises:
            InvalidHostError: If the host is missing or unparsable.
            InvalidURLFormatError: If the target link is missing,
                unparsable or not http(s).
            DomainNotAllowedError: If the target link's host is not
                in the tenant's allow-list.
        """
        durable_link = request.durable_link_info.model_copy(deep=True)
        warnings: list[LinkWarning] = []

        host = clean_host(durable_link.host)
        durable_link.host = host

        self._check_target_link(durable_link.link, tenant)

        self._apply_defaults(durable_link, tenant, warnings)
        self._clear_malformed_urls(durable_link, warnings)
        self._check_itunes_analytics(durable_link, warnings)
        wants_short_path = self._resolve_suffix(request.suffix.option, warnings)

        return NormalizedLink(
            host=host,
            durable_link=durable_link,
            wants_short_path=wants_short_path,
            warnings=warnings,
        )

    @staticmethod
    def _check_target_link(link: str, tenant: TenantConfig) -> None:
        if not link:
            raise MissingLinkError()
        validate_scheme(link)

        if not is_domain_allowed(tenant.domain_allow_list, link):
            logger.error("Domain link not in allow list: link=%s", link)
            raise DomainNotAllowedError(link)

    @staticmethod
    def _apply_defaults(
        durable_link: DurableLink,
        tenant: TenantConfig,
        warnings: list[LinkWarning],
    ) -> None:
        ios = durable_link.ios_parameters
        if ios.ios_app_store_id is None and tenant.default_ios_app_store_id is not None:
            ios.ios_app_store_id = tenant.default_ios_app_store_id
            warnings.append(
                LinkWarning(
                    code=WarningCode.DEFAULT_APPLIED,
                    message=f"Using default iOS App Store ID: {tenant.default_ios_app_store_id}",
                )
            )

        android = durable_link.android_parameters
        if android.android_package_name is None and tenant.default_android_package is not None:
            android.android_package_name = tenant.default_android_package
            warnings.append(
                LinkWarning(
                    code=WarningCode.DEFAULT_APPLIED,
                    message=f"Using default Android package name: {tenant.default_android_package}",
                )
            )

    @staticmethod
    def _clear_malformed_urls(
        durable_link: DurableLink, warnings: list[LinkWarning]
    ) -> None:
        for group_name, field_name, wire_name in URL_PARAMETERS:
            group = getattr(durable_link, group_name)
            value = getattr(group, field_name)
            if value and not is_well_formed_url(value):
                warnings.append(
                    LinkWarning(
                        code=WarningCode.MALFORMED_PARAM,
                        message=f"Param '{wire_name}' is not a valid URL",
                    )
                )
                setattr(group, field_name, None)

    @staticmethod
    def _check_itunes_analytics(
        durable_link: DurableLink, warnings: list[LinkWarning]
    ) -> None:
        itunes = durable_link.analytics_info.itunes_connect_analytics

        def unrecognized(name: str, value, missing: str) -> None:
            if value:
                warnings.append(
                    LinkWarning(
                        code=WarningCode.UNRECOGNIZED_PARAM,
                        message=f"Param '{name}' is not needed, since '{missing}' is not specified.",
                    )
                )

        # Both checks always run; a token can be flagged twice.
        if durable_link.ios_parameters.ios_app_store_id is None:
            unrecognized("at", itunes.at, "isi")
            unrecognized("ct", itunes.ct, "isi")
            unrecognized("mt", itunes.mt, "isi")
            unrecognized("pt", itunes.pt, "isi")

        if not itunes.pt:
            unrecognized("at", itunes.at, "pt")
            unrecognized("ct", itunes.ct, "pt")
            unrecognized("mt", itunes.mt, "pt")

    @staticmethod
    def _resolve_suffix(option: str, warnings: list[LinkWarning]) -> bool:
        normalized = (option or "").upper()
        if normalized == SuffixOption.SHORT.value:
            return True
        if normalized == SuffixOption.UNGUESSABLE.value:
            return False

        warnings.append(
            LinkWarning(
                code=WarningCode.INVALID_SUFFIX_OPTION,
                message=(
                    "Param 'suffix.option' must be 'SHORT' or 'UNGUESSABLE'. "
                    f"Received '{option}', defaulting to 'UNGUESSABLE'."
                ),
            )
        )
        return False
