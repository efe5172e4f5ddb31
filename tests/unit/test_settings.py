"""Unit tests for settings loading."""

import pytest

from confluence_mcp.configuration import settings as settings_module
from confluence_mcp.configuration.container import build_container
from confluence_mcp.configuration.settings import build_settings

_ENV_VARS = (
    "APP_ENV", "SERVER_NAME", "CONFLUENCE_SITE_NAME", "CONFLUENCE_API_TOKEN", "CONFLUENCE_EMAIL",
    "SKIP_API_CONNECTION_TEST", "REQUEST_TIMEOUT", "LOG_LEVEL", "LOG_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate every test from the developer's shell and .env files."""
    monkeypatch.setattr(settings_module, "_load_env", lambda: None)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CONFLUENCE_SITE_NAME", "example.atlassian.net")
    monkeypatch.setenv("CONFLUENCE_API_TOKEN", "a-real-looking-token")


class TestBuildSettings:
    """Test cases for build_settings."""

    def test_defaults(self):
        """Only the required variables set: everything else falls back to defaults."""
        settings = build_settings()

        assert settings.site_name == "example.atlassian.net"
        assert settings.server_name == "confluence-cloud-mcp-server"
        assert settings.app_env == "local"
        assert settings.email is None
        assert settings.skip_connection_test is False
        assert settings.request_timeout == 30.0
        assert settings.log_level == "INFO"

    @pytest.mark.parametrize("missing", ["CONFLUENCE_SITE_NAME", "CONFLUENCE_API_TOKEN"])
    def test_missing_required_variable_is_fatal(self, monkeypatch, missing):
        """A missing required variable should raise RuntimeError naming it."""
        monkeypatch.delenv(missing)

        with pytest.raises(RuntimeError, match=missing):
            build_settings()

    @pytest.mark.parametrize("token", ["your-api-token", "short"])
    def test_placeholder_or_short_token_is_rejected(self, monkeypatch, token):
        """The example placeholder and tokens under 10 characters are invalid."""
        monkeypatch.setenv("CONFLUENCE_API_TOKEN", token)

        with pytest.raises(RuntimeError, match="appears to be invalid"):
            build_settings()

    def test_site_given_as_url_resolves_once_in_the_adapter(self, monkeypatch):
        """Settings keep the site as configured; the adapter reduces it to the host."""
        monkeypatch.setenv("CONFLUENCE_SITE_NAME", "https://example.atlassian.net/")

        settings = build_settings()
        adapter = build_container(settings).confluence_adapter

        assert settings.site_name == "https://example.atlassian.net/"
        assert adapter.site_name == "example.atlassian.net"
        assert adapter.wiki_base_url == "https://example.atlassian.net/wiki"

    def test_optional_values(self, monkeypatch, tmp_path):
        """Optional variables should be parsed into typed fields."""
        monkeypatch.setenv("CONFLUENCE_EMAIL", "me@example.com")
        monkeypatch.setenv("SKIP_API_CONNECTION_TEST", "True")
        monkeypatch.setenv("REQUEST_TIMEOUT", "12.5")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        monkeypatch.setenv("SERVER_NAME", "wiki")

        settings = build_settings()

        assert settings.email == "me@example.com"
        assert settings.skip_connection_test is True
        assert settings.request_timeout == 12.5
        assert settings.log_level == "DEBUG"
        assert settings.log_dir == str(tmp_path)
        assert settings.server_name == "wiki"

    def test_invalid_timeout_is_fatal(self, monkeypatch):
        """A non-numeric REQUEST_TIMEOUT should raise RuntimeError."""
        monkeypatch.setenv("REQUEST_TIMEOUT", "soon")

        with pytest.raises(RuntimeError, match="REQUEST_TIMEOUT"):
            build_settings()
