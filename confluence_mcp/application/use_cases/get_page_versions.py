import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.domain.confluence import VersionRecord

logger = logging.getLogger(__name__)


class GetPageVersionsUseCase:
    """Page version history, newest first"""

    def __init__(self, confluence_port: ConfluencePort):
        self.confluence_port = confluence_port

    async def execute(self, page_id: str, limit: int = 10) -> list[VersionRecord]:
        logger.info("GetPageVersionsUseCase: page_id=%s, limit=%d", page_id, limit)
        versions = await self.confluence_port.get_page_versions(page_id, limit=limit)
        return sorted(versions, key=lambda v: v.number, reverse=True)
