import logging

from confluence_mcp.application.services.search_resolver import SearchResolver
from confluence_mcp.domain.confluence import SearchOutcome, SearchQuery

logger = logging.getLogger(__name__)


class SearchPagesUseCase:
    def __init__(self, search_resolver: SearchResolver):
        self.search_resolver = search_resolver

    async def execute(self, query: SearchQuery) -> SearchOutcome:
        logger.info(
            "🔍 SearchPagesUseCase: query=%s, title=%s, space_key=%s, space_id=%s, limit=%d, sort=%s",
            query.query, query.title, query.space_key, query.space_id, query.limit, query.sort_by.value,
        )
        outcome = await self.search_resolver.search(query)
        logger.info("✅ Search completed via %s: %d results", outcome.method.value, len(outcome.results))
        return outcome
