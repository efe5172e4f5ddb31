import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.domain.confluence import CommentPage

logger = logging.getLogger(__name__)


class GetPageCommentsUseCase:
    def __init__(self, confluence_port: ConfluencePort):
        self.confluence_port = confluence_port

    async def execute(self, page_id: str, limit: int = 25, cursor: str | None = None) -> CommentPage:
        logger.info("GetPageCommentsUseCase: page_id=%s, limit=%d, cursor=%s", page_id, limit, cursor)
        return await self.confluence_port.get_page_comments(page_id, limit=limit, cursor=cursor)
