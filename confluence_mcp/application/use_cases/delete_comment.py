import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort

logger = logging.getLogger(__name__)


class DeleteCommentUseCase:
    def __init__(self, confluence_port: ConfluencePort):
        self.confluence_port = confluence_port

    async def execute(self, comment_id: str) -> str:
        logger.info("DeleteCommentUseCase: comment_id=%s", comment_id)
        await self.confluence_port.delete_comment(comment_id)
        return comment_id
