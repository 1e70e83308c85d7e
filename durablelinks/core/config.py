"""
Application configuration using Pydantic Settings.

All configuration is read from environment variables (12-factor app),
with sensible defaults for local Docker Compose development. The tenant
section describes the link namespace served by this deployment.
"""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field

from durablelinks.domain.models import AppStoreId, TenantConfig


class Settings(BaseSettings):
    """Central application configuration."""

    # MongoDB
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI",
    )
    mongo_db_name: str = Field(
        default="durable_links",
        description="MongoDB database name",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Application log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=8000, description="API bind port")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API (JSON list)",
    )

    # Tenant
    url_scheme: str = Field(
        default="https",
        description="Scheme used when building short and long links",
    )
    domain_allow_list: list[str] = Field(
        default_factory=list,
        description="Hosts that target links may point to (JSON list)",
    )
    short_path_length: int = Field(
        default=8,
        gt=0,
        description="Length of SHORT (guessable, reusable) paths",
    )
    unguessable_path_length: int = Field(
        default=17,
        gt=0,
        description="Length of UNGUESSABLE (never reused) paths",
    )
    default_ios_app_store_id: Optional[AppStoreId] = Field(
        default=None,
        description="App Store ID applied when a request omits one",
    )
    default_android_package: Optional[str] = Field(
        default=None,
        description="Android package name applied when a request omits one",
    )
    max_path_attempts: int = Field(
        default=3,
        gt=0,
        description="Path generation attempts before giving up on collisions",
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def tenant_config(self) -> TenantConfig:
        """Build the tenant configuration consumed by the link service."""
        return TenantConfig(
            url_scheme=self.url_scheme,
            domain_allow_list=self.domain_allow_list,
            short_path_length=self.short_path_length,
            unguessable_path_length=self.unguessable_path_length,
            default_ios_app_store_id=self.default_ios_app_store_id,
            default_android_package=self.default_android_package,
        )


# Singleton: import this throughout the app
settings = Settings()
