"""Unit tests for server startup failure reporting."""

import dataclasses
import logging
from unittest.mock import Mock

import pytest

from confluence_mcp import main as main_module


class TestStartupFailure:
    """Test cases for main() when the server cannot start."""

    async def test_configuration_error_logs_failure_banner(self, monkeypatch, caplog):
        """A fatal configuration error is reported through the startup banner."""
        monkeypatch.setattr(
            main_module, "build_settings",
            Mock(side_effect=RuntimeError("Missing required environment variables: CONFLUENCE_API_TOKEN")),
        )
        setup_logging = Mock()
        monkeypatch.setattr(main_module, "setup_logging", setup_logging)

        with caplog.at_level(logging.ERROR), pytest.raises(RuntimeError, match="CONFLUENCE_API_TOKEN"):
            await main_module.main()

        assert "MCP server failed to start!" in caplog.text
        assert "Error type: RuntimeError" in caplog.text
        assert "Missing required environment variables: CONFLUENCE_API_TOKEN" in caplog.text
        setup_logging.assert_not_called()

    async def test_failed_connection_test_logs_failure_banner(self, monkeypatch, caplog, settings, container, fake):
        """An unreachable Confluence stops startup before the stdio loop."""
        fake.fail["/wiki/api/v2/spaces"] = 401
        monkeypatch.setattr(
            main_module, "build_settings", Mock(return_value=dataclasses.replace(settings, skip_connection_test=False)),
        )
        monkeypatch.setattr(main_module, "setup_logging", Mock())
        monkeypatch.setattr(main_module, "build_container", Mock(return_value=container))

        with caplog.at_level(logging.ERROR), pytest.raises(RuntimeError, match="Failed to connect"):
            await main_module.main()

        assert "MCP server failed to start!" in caplog.text
