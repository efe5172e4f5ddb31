import logging

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.domain.confluence import Space

logger = logging.getLogger(__name__)


class GetSpacesUseCase:
    def __init__(self, confluence_port: ConfluencePort):
        self.confluence_port = confluence_port

    async def execute(self, limit: int = 25) -> list[Space]:
        logger.info("GetSpacesUseCase: limit=%d", limit)
        return await self.confluence_port.get_spaces(limit=limit)
