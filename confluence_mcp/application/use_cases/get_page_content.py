import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.domain.confluence import BodyFormat, Page

logger = logging.getLogger(__name__)


class GetPageContentUseCase:
    def __init__(self, confluence_port: ConfluencePort):
        self.confluence_port = confluence_port

    async def execute(
        self,
        page_id: str,
        body_format: BodyFormat = BodyFormat.STORAGE,
        version: int | None = None,
    ) -> Page:
        """Fetch a page with its body; ``version`` selects a historical revision."""
        logger.info("GetPageContentUseCase: page_id=%s, format=%s, version=%s", page_id, body_format.value, version)
        return await self.confluence_port.get_page(page_id, body_format=body_format, version=version)
