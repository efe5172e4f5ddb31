import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.domain.confluence import DeletedPage
from confluence_mcp.domain.errors import ConfluenceError

logger = logging.getLogger(__name__)


class DeletePageUseCase:
    def __init__(self, confluence_port: ConfluencePort):
        self.confluence_port = confluence_port

    async def execute(self, page_id: str, draft: bool = False) -> DeletedPage:
        """Delete a page, reporting its title and space when they can be read first.

        The lookup is informational only; the delete call decides the outcome.
        """
        logger.info("DeletePageUseCase: page_id=%s, draft=%s", page_id, draft)

        title, space_id = "Unknown page", "Unknown space"
        try:
            page = await self.confluence_port.get_page(page_id)
            title, space_id = page.title, page.space_id
        except ConfluenceError as e:
            logger.warning("Could not read page %s before deletion (%s): %s", page_id, e.kind.value, e.message)

        await self.confluence_port.delete_page(page_id, draft=draft)
        return DeletedPage(page_id=page_id, title=title, space_id=space_id, draft=draft)
