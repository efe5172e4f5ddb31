import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.application.services.content_converter import ContentConverter
from confluence_mcp.domain.confluence import ContentFormat, Page

logger = logging.getLogger(__name__)


class CreatePageUseCase:
    """Creates a page in a space, optionally under a parent page"""

    def __init__(self, confluence_port: ConfluencePort, content_converter: ContentConverter):
        self.confluence_port = confluence_port
        self.content_converter = content_converter

    async def execute(
        self,
        space_id: str,
        title: str,
        content: str,
        parent_id: str | None = None,
        content_format: ContentFormat = ContentFormat.STORAGE,
    ) -> Page:
        logger.info("CreatePageUseCase: space_id=%s, title=%s, format=%s", space_id, title, content_format.value)
        body = self.content_converter.to_storage(content, content_format)
        return await self.confluence_port.create_page(
            space_id=space_id,
            title=title,
            body=body,
            parent_id=parent_id,
        )
