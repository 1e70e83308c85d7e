"""
Domain models: pure data structures for the durable link service.

These models have no framework dependencies beyond Pydantic and
represent the core business entities. They are used across all layers.

Field names are snake_case in Python and camelCase on the wire, so the
same models double as request payloads.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# Non-negative and within the BSON int64 range
MAX_APP_STORE_ID = 2**63 - 1

AppStoreId = Annotated[int, Field(ge=0, le=MAX_APP_STORE_ID)]


# Canonical order of the optional parameters. ParamsHash depends on it.
OPTIONAL_PARAMETER_FIELDS = (
    "android_package_name",
    "android_fallback_link",
    "android_min_version",
    "ios_fallback_link",
    "ios_ipad_fallback_link",
    "ios_app_store_id",
    "social_title",
    "social_description",
    "social_image_link",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "itunes_pt",
    "itunes_at",
    "itunes_ct",
    "itunes_mt",
    "other_fallback_url",
)


class CamelModel(BaseModel):
    """Base model serialised with camelCase aliases."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class AndroidParameters(CamelModel):
    android_package_name: Optional[str] = None
    android_fallback_link: Optional[str] = None
    android_min_package_version_code: Optional[str] = None


class IOSParameters(CamelModel):
    ios_fallback_link: Optional[str] = None
    ios_ipad_fallback_link: Optional[str] = None
    ios_app_store_id: Optional[AppStoreId] = None


class OtherPlatformParameters(CamelModel):
    fallback_url: Optional[str] = None


class SocialMetaTagInfo(CamelModel):
    social_title: Optional[str] = None
    social_description: Optional[str] = None
    social_image_link: Optional[str] = None


class MarketingParameters(CamelModel):
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None


class ITunesConnectAnalytics(CamelModel):
    """iTunes Connect analytics: provider, affiliate, campaign and media tokens."""

    pt: Optional[str] = None
    at: Optional[str] = None
    ct: Optional[str] = None
    mt: Optional[str] = None


class AnalyticsInfo(CamelModel):
    marketing_parameters: MarketingParameters = Field(
        default_factory=MarketingParameters
    )
    itunes_connect_analytics: ITunesConnectAnalytics = Field(
        default_factory=ITunesConnectAnalytics
    )


class DurableLink(CamelModel):
    """
    A target link plus its platform fallbacks and analytics tags.

    Every parameter is optional; `None` (absent) and `""` are distinct
    values and hash differently.
    """

    host: str = Field(default="", description="Short link domain")
    link: str = Field(default="", description="Target (deep) link")
    android_parameters: AndroidParameters = Field(
        default_factory=AndroidParameters
    )
    ios_parameters: IOSParameters = Field(default_factory=IOSParameters)
    other_platform_parameters: OtherPlatformParameters = Field(
        default_factory=OtherPlatformParameters
    )
    social_meta_tag_info: SocialMetaTagInfo = Field(
        default_factory=SocialMetaTagInfo
    )
    analytics_info: AnalyticsInfo = Field(default_factory=AnalyticsInfo)

    def optional_parameters(self) -> dict[str, Any]:
        """Return the optional parameters keyed by their flat storage name."""
        android = self.android_parameters
        ios = self.ios_parameters
        social = self.social_meta_tag_info
        utm = self.analytics_info.marketing_parameters
        itunes = self.analytics_info.itunes_connect_analytics

        return {
            "android_package_name": android.android_package_name,
            "android_fallback_link": android.android_fallback_link,
            "android_min_version": android.android_min_package_version_code,
            "ios_fallback_link": ios.ios_fallback_link,
            "ios_ipad_fallback_link": ios.ios_ipad_fallback_link,
            "ios_app_store_id": ios.ios_app_store_id,
            "social_title": social.social_title,
            "social_description": social.social_description,
            "social_image_link": social.social_image_link,
            "utm_source": utm.utm_source,
            "utm_medium": utm.utm_medium,
            "utm_campaign": utm.utm_campaign,
            "utm_term": utm.utm_term,
            "utm_content": utm.utm_content,
            "itunes_pt": itunes.pt,
            "itunes_at": itunes.at,
            "itunes_ct": itunes.ct,
            "itunes_mt": itunes.mt,
            "other_fallback_url": self.other_platform_parameters.fallback_url,
        }


class SuffixOption(str, Enum):
    SHORT = "SHORT"
    UNGUESSABLE = "UNGUESSABLE"


class Suffix(CamelModel):
    """Requested path style. Free text; resolved during normalisation."""

    option: str = ""


class CreateDurableLinkRequest(CamelModel):
    durable_link_info: DurableLink = Field(default_factory=DurableLink)
    suffix: Suffix = Field(default_factory=Suffix)


class WarningCode(str, Enum):
    DEFAULT_APPLIED = "DEFAULT_APPLIED"
    MALFORMED_PARAM = "MALFORMED_PARAM"
    UNRECOGNIZED_PARAM = "UNRECOGNIZED_PARAM"
    INVALID_SUFFIX_OPTION = "INVALID_SUFFIX_OPTION"


class LinkWarning(BaseModel):
    """Non-fatal problem found while normalising a creation request."""

    code: WarningCode
    message: str


class TenantConfig(BaseModel):
    """Per-tenant link settings."""

    url_scheme: str = "https"
    domain_allow_list: list[str] = Field(default_factory=list)
    short_path_length: int = Field(default=8, gt=0)
    unguessable_path_length: int = Field(default=17, gt=0)
    default_ios_app_store_id: Optional[AppStoreId] = None
    default_android_package: Optional[str] = None


class NormalizedLink(BaseModel):
    """Output of link normalisation, ready for deduplication."""

    host: str
    durable_link: DurableLink
    wants_short_path: bool
    warnings: list[LinkWarning] = Field(default_factory=list)


class CreationOutcome(str, Enum):
    CREATED = "created"
    REUSED = "reused"


class ShortLink(BaseModel):
    """Result of a creation request."""

    short_link: str
    path: str
    outcome: CreationOutcome
    warnings: list[LinkWarning] = Field(default_factory=list)


class LongLink(BaseModel):
    """Result of resolving a short link."""

    long_link: str
    durable_link: DurableLink


class StoredLink(BaseModel):
    """
    Durable link record as stored in the database.

    Flat layout: the optional parameter groups of DurableLink are
    spread into top-level fields named by OPTIONAL_PARAMETER_FIELDS.
    """

    id: Optional[str] = Field(None, description="MongoDB document ID")
    host: str = Field(..., description="Cleaned short link host")
    path: str = Field(..., description="Short path code")
    link: str = Field(..., description="Target link")
    is_unguessable_path: bool = False
    tenant_id: Optional[str] = Field(None, description="Owning tenant")

    android_package_name: Optional[str] = None
    android_fallback_link: Optional[str] = None
    android_min_version: Optional[str] = None
    ios_fallback_link: Optional[str] = None
    ios_ipad_fallback_link: Optional[str] = None
    ios_app_store_id: Optional[AppStoreId] = None
    social_title: Optional[str] = None
    social_description: Optional[str] = None
    social_image_link: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None
    itunes_pt: Optional[str] = None
    itunes_at: Optional[str] = None
    itunes_ct: Optional[str] = None
    itunes_mt: Optional[str] = None
    other_fallback_url: Optional[str] = None

    params_hash: str = Field(default="", description="SHA-256 of the optional parameters")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_durable_link(
        cls,
        durable_link: DurableLink,
        host: str,
        path: str,
        is_unguessable_path: bool,
        tenant_id: Optional[str] = None,
    ) -> "StoredLink":
        """Flatten a DurableLink into a record. params_hash is left empty."""
        return cls(
            host=host,
            path=path,
            link=durable_link.link,
            is_unguessable_path=is_unguessable_path,
            tenant_id=tenant_id,
            **durable_link.optional_parameters(),
        )

    def optional_parameters(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in OPTIONAL_PARAMETER_FIELDS}

    def to_durable_link(self) -> DurableLink:
        return DurableLink(
            host=self.host,
            link=self.link,
            android_parameters=AndroidParameters(
                android_package_name=self.android_package_name,
                android_fallback_link=self.android_fallback_link,
                android_min_package_version_code=self.android_min_version,
            ),
            ios_parameters=IOSParameters(
                ios_fallback_link=self.ios_fallback_link,
                ios_ipad_fallback_link=self.ios_ipad_fallback_link,
                ios_app_store_id=self.ios_app_store_id,
            ),
            other_platform_parameters=OtherPlatformParameters(
                fallback_url=self.other_fallback_url,
            ),
            social_meta_tag_info=SocialMetaTagInfo(
                social_title=self.social_title,
                social_description=self.social_description,
                social_image_link=self.social_image_link,
            ),
            analytics_info=AnalyticsInfo(
                marketing_parameters=MarketingParameters(
                    utm_source=self.utm_source,
                    utm_medium=self.utm_medium,
                    utm_campaign=self.utm_campaign,
                    utm_term=self.utm_term,
                    utm_content=self.utm_content,
                ),
                itunes_connect_analytics=ITunesConnectAnalytics(
                    pt=self.itunes_pt,
                    at=self.itunes_at,
                    ct=self.itunes_ct,
                    mt=self.itunes_mt,
                ),
            ),
        )

    @classmethod
    def from_mongo(cls, doc: dict) -> "StoredLink":
        """
        Construct a StoredLink from a raw MongoDB document.

        Handles _id → id conversion and missing optional fields.
        """
        if doc is None:
            raise ValueError("Cannot create StoredLink from None")

        fields = {
            name: doc.get(name)
            for name in OPTIONAL_PARAMETER_FIELDS
        }
        return cls(
            id=str(doc.get("_id", "")),
            host=doc.get("host", ""),
            path=doc.get("path", ""),
            link=doc.get("link", ""),
            is_unguessable_path=doc.get("is_unguessable_path", False),
            tenant_id=doc.get("tenant_id"),
            params_hash=doc.get("params_hash", ""),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            **fields,
        )

    def to_mongo(self) -> dict[str, Any]:
        """Document payload for insertion; `_id` is assigned by MongoDB."""
        return self.model_dump(exclude={"id"})
