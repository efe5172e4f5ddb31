"""Root pytest configuration shared by unit and integration tests."""

import logging

import pytest

from confluence_mcp.adapters.outbound.confluence_adapter import ConfluenceAdapter
from confluence_mcp.configuration.container import build_container
from confluence_mcp.configuration.settings import Settings
from tests.helpers.fake_confluence import SITE, FakeConfluence

# Request logging from httpx drowns out the adapter's own lines in failure output.
logging.getLogger("httpx").setLevel(logging.WARNING)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        app_env="test",
        server_name="confluence-test",
        site_name=SITE,
        api_token="test-token-1234567890",
        email="tester@example.com",
        skip_connection_test=True,
        request_timeout=5.0,
        log_level="DEBUG",
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def fake() -> FakeConfluence:
    return FakeConfluence()


@pytest.fixture
def adapter(fake: FakeConfluence) -> ConfluenceAdapter:
    return ConfluenceAdapter(
        site_name=SITE,
        api_token="test-token-1234567890",
        email="tester@example.com",
        transport=fake.transport,
    )


@pytest.fixture
def container(settings: Settings, fake: FakeConfluence):
    return build_container(settings, transport=fake.transport)
