import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.application.services.content_converter import ContentConverter
from confluence_mcp.domain.confluence import CommentUpdateResult, ContentFormat

logger = logging.getLogger(__name__)


class UpdateCommentUseCase:
    def __init__(self, confluence_port: ConfluencePort, content_converter: ContentConverter):
        self.confluence_port = confluence_port
        self.content_converter = content_converter

    async def execute(
        self,
        comment_id: str,
        content: str,
        version: int,
        content_format: ContentFormat = ContentFormat.STORAGE,
    ) -> CommentUpdateResult:
        """
        Update a comment's body.

        Args:
            version: the comment's *current* version; the request carries version + 1.
        """
        next_version = version + 1
        logger.info("UpdateCommentUseCase: comment_id=%s, version %d → %d", comment_id, version, next_version)

        body = self.content_converter.to_storage(content, content_format)
        comment = await self.confluence_port.update_comment(comment_id, body, next_version)
        return CommentUpdateResult(comment=comment, previous_version=version)
