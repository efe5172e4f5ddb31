import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.application.services.content_converter import ContentConverter
from confluence_mcp.domain.confluence import ContentFormat, PageUpdateResult

logger = logging.getLogger(__name__)

DEFAULT_VERSION_MESSAGE = "Updated page via MCP"


class UpdatePageUseCase:
    """Updates a page's title and/or body.

    The current page is read first so that whichever of title and body the
    caller leaves out is carried over unchanged.
    """

    def __init__(self, confluence_port: ConfluencePort, content_converter: ContentConverter):
        self.confluence_port = confluence_port
        self.content_converter = content_converter

    async def execute(
        self,
        page_id: str,
        version: int,
        title: str | None = None,
        content: str | None = None,
        version_message: str | None = None,
        content_format: ContentFormat = ContentFormat.STORAGE,
    ) -> PageUpdateResult:
        """
        Args:
            version: the page's next version number (current + 1), sent as-is.
                The backend rejects anything else with a conflict.
        """
        logger.info("UpdatePageUseCase: page_id=%s, version=%d", page_id, version)

        current = await self.confluence_port.get_page(page_id)

        body = current.body
        if content:
            body = self.content_converter.to_storage(content, content_format)
        message = version_message or DEFAULT_VERSION_MESSAGE

        updated = await self.confluence_port.update_page(
            page_id=page_id,
            title=title or current.title,
            body=body,
            version_number=version,
            version_message=message,
        )

        changes = []
        if title and title != current.title:
            changes.append(f'Title: "{current.title}" → "{title}"')
        if content:
            changes.append("Content updated")

        logger.info(
            "✅ UpdatePageUseCase done: %s v%d → v%d",
            page_id, current.version.number, updated.version.number,
        )
        return PageUpdateResult(previous=current, page=updated, changes=changes, version_message=message)
