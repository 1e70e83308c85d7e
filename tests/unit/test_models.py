"""
Unit tests for field constraints on the domain models.
"""

import pytest
from pydantic import ValidationError

from durablelinks.domain.models import (
    MAX_APP_STORE_ID,
    IOSParameters,
    StoredLink,
    TenantConfig,
)


class TestAppStoreId:
    """Range checks on iOS App Store IDs."""

    @pytest.mark.parametrize("value", [0, 123456789, MAX_APP_STORE_ID])
    def test_in_range(self, value):
        assert IOSParameters(ios_app_store_id=value).ios_app_store_id == value

    @pytest.mark.parametrize("value", [-1, MAX_APP_STORE_ID + 1, 99999999999999999999])
    def test_out_of_range(self, value):
        with pytest.raises(ValidationError):
            IOSParameters(ios_app_store_id=value)

    def test_tenant_default_is_bounded(self):
        with pytest.raises(ValidationError):
            TenantConfig(default_ios_app_store_id=-5)

    def test_stored_link_is_bounded(self):
        with pytest.raises(ValidationError):
            StoredLink(
                host="example.com",
                path="abc123",
                link="https://example.com",
                ios_app_store_id=MAX_APP_STORE_ID + 1,
            )


class TestTenantConfig:
    """Path length constraints."""

    def test_defaults(self):
        tenant = TenantConfig()
        assert tenant.short_path_length == 8
        assert tenant.unguessable_path_length == 17

    @pytest.mark.parametrize("field", ["short_path_length", "unguessable_path_length"])
    @pytest.mark.parametrize("value", [0, -3])
    def test_path_length_must_be_positive(self, field, value):
        with pytest.raises(ValidationError):
            TenantConfig(**{field: value})
