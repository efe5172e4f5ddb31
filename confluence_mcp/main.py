import asyncio
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path

from mcp.server import Server
from mcp.server.stdio import stdio_server

from confluence_mcp.adapters.inbound.mcp.tools import register_tools
from confluence_mcp.configuration.container import build_container
from confluence_mcp.configuration.settings import Settings, build_settings

logger = logging.getLogger(__name__)

_LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'


def setup_logging(log_dir: str, level: str = "INFO") -> None:
    """Log to stderr (shown in the MCP host's log) and to a rotating file.

    stdout carries the protocol stream, so nothing may be logged there.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    root_logger.addHandler(stderr_handler)

    # 10MB x 5 backups
    file_handler = RotatingFileHandler(
        log_path / "mcp-server.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # request lines from httpx are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _log_startup(settings: Settings) -> None:
    logger.info("Server name: %s", settings.server_name)
    logger.info("Environment: %s", settings.app_env)
    logger.info("Confluence site: %s", settings.site_name)
    logger.info("Auth: %s", "basic (email + token)" if settings.email else "bearer token")
    logger.info("Request timeout: %.1fs", settings.request_timeout)


async def main() -> None:
    try:
        # no handlers yet if this fails; the banner reaches stderr via logging.lastResort
        settings = build_settings()
        setup_logging(settings.log_dir, settings.log_level)

        logger.info("=" * 60)
        logger.info("MCP server initializing")
        _log_startup(settings)

        container = build_container(settings)
        logger.info("✅ Container built")

        if settings.skip_connection_test:
            logger.info("⏭️ Confluence connection test skipped (SKIP_API_CONNECTION_TEST)")
        elif await container.confluence_adapter.test_connection():
            logger.info("✅ Confluence API connection verified")
        else:
            raise RuntimeError(
                "Failed to connect to Confluence API. "
                "Check CONFLUENCE_SITE_NAME and CONFLUENCE_API_TOKEN"
            )

        app = Server(settings.server_name)
        register_tools(app, container)
        logger.info("✅ MCP tools registered")

        logger.info("MCP server starting on stdio")
        logger.info("=" * 60)

        try:
            async with stdio_server() as (read_stream, write_stream):
                await app.run(read_stream, write_stream, app.create_initialization_options())
        finally:
            logger.info("MCP server stopped")

    except Exception as e:
        logger.error("=" * 60)
        logger.error("MCP server failed to start!")
        logger.error("Error type: %s", type(e).__name__)
        logger.error("Error message: %s", str(e))
        logger.error("=" * 60)
        traceback.print_exc(file=sys.stderr)
        raise


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
