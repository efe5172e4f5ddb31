import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.application.services.content_converter import ContentConverter
from confluence_mcp.domain.confluence import Comment, ContentFormat

logger = logging.getLogger(__name__)


class AddCommentUseCase:
    """Adds a footer comment, or a threaded reply when parent_id is given"""

    def __init__(self, confluence_port: ConfluencePort, content_converter: ContentConverter):
        self.confluence_port = confluence_port
        self.content_converter = content_converter

    async def execute(
        self,
        page_id: str,
        content: str,
        parent_id: str | None = None,
        content_format: ContentFormat = ContentFormat.STORAGE,
    ) -> Comment:
        logger.info("AddCommentUseCase: page_id=%s, parent_id=%s", page_id, parent_id)
        body = self.content_converter.to_storage(content, content_format)
        return await self.confluence_port.add_comment(page_id, body, parent_id=parent_id)
