"""Unit tests for Settings validation."""

import pytest
from pydantic import ValidationError

from livefeed.core.config import Settings
from livefeed.core.enums import Environment


@pytest.mark.unit
class TestSettings:
    """Tests for defaults and validators."""

    def test_stream_defaults(self):
        settings = Settings()

        assert settings.sse_stream_key == "sse:stream:broadcast"
        assert settings.sse_stream_max_len == 1000
        assert settings.sse_block_ms == 1000
        assert settings.sse_read_count == 10
        assert settings.sse_heartbeat_interval_seconds == 15.0
        assert settings.sse_tenant_header == "client-id"

    def test_environment_variables_override_defaults(self, monkeypatch):
        monkeypatch.setenv("SSE_STREAM_KEY", "sse:stream:custom")
        monkeypatch.setenv("SSE_BLOCK_MS", "250")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings()

        assert settings.sse_stream_key == "sse:stream:custom"
        assert settings.sse_block_ms == 250
        assert settings.is_production
        assert not settings.is_development

    @pytest.mark.parametrize(
        "field", ["sse_block_ms", "sse_read_count", "sse_stream_max_len"]
    )
    def test_non_positive_integers_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValidationError):
            Settings(sse_connection_lifetime_seconds=0)

    def test_block_must_be_shorter_than_heartbeat(self):
        with pytest.raises(ValidationError):
            Settings(sse_block_ms=5000, sse_heartbeat_interval_seconds=5.0)

    def test_tenant_header_is_lowercased(self):
        assert Settings(sse_tenant_header=" X-Tenant ").sse_tenant_header == "x-tenant"

    def test_base_url_trailing_slash_removed(self):
        assert Settings(api_base_url="https://api.example.com/").api_base_url == (
            "https://api.example.com"
        )

    def test_environment_flags(self):
        settings = Settings(environment=Environment.TESTING)

        assert settings.is_testing
        assert not settings.is_ci
