import logging
import re

from confluence_mcp.application.ports.confluence_port import ConfluencePort
from confluence_mcp.domain.confluence import (
    SearchMethod,
    SearchOutcome,
    SearchQuery,
    SearchResult,
    SortBy,
    StrategyFailure,
)
from confluence_mcp.domain.errors import ConfluenceError, InvalidArgumentError

logger = logging.getLogger(__name__)

_CQL_ORDER_BY = {
    SortBy.TITLE: "title",
    SortBy.CREATED: "created desc",
    SortBy.MODIFIED: "lastmodified desc",
}

_HIGHLIGHT_MARKERS = re.compile(r"@@@(end)?hl@@@")

SEARCH_UNAVAILABLE_MESSAGE = (
    "Search is unavailable for these parameters. "
    "Use getSpaces to list spaces, then getPageContent with a known page ID"
)


def escape_cql(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_cql(query: SearchQuery, space_key: str | None = None) -> str:
    """Build the CQL expression for a query or title search.

    Pages only, optionally scoped to one space. A free-text query matches a
    title prefix or body text; a title alone matches a title prefix.
    """
    clauses = ["type = page"]
    if space_key:
        clauses.append(f'space = "{escape_cql(space_key)}"')
    if query.query:
        text = escape_cql(query.query.strip())
        clauses.append(f'(title ~ "{text}*" OR text ~ "{text}")')
    elif query.title:
        title = escape_cql(query.title.strip())
        clauses.append(f'title ~ "{title}*"')

    cql = " AND ".join(clauses)
    order_by = _CQL_ORDER_BY.get(query.sort_by)
    if order_by:
        cql += f" ORDER BY {order_by}"
    return cql


def _absolute_url(base: str, link: str) -> str:
    if not link:
        return ""
    if link.startswith("http"):
        return link
    return f"{base.rstrip('/')}{link}"


def _display_name(*people: dict | None) -> str:
    for person in people:
        if person and person.get("displayName"):
            return person["displayName"]
    return ""


def normalize_cql_results(data: dict, base_url: str) -> list[SearchResult]:
    """Normalize a /rest/api/search payload."""
    base = (data.get("_links") or {}).get("base") or base_url
    results = []
    for item in data.get("results", []):
        content = item.get("content") or {}
        space = content.get("space") or {}
        container = item.get("resultGlobalContainer") or {}
        version = content.get("version") or {}
        history = content.get("history") or {}
        link = item.get("url") or (content.get("_links") or {}).get("webui", "")
        results.append(SearchResult(
            id=str(content.get("id") or item.get("id", "")),
            title=content.get("title") or _HIGHLIGHT_MARKERS.sub("", item.get("title", "")),
            type=content.get("type") or item.get("entityType", "page"),
            space_key=space.get("key", ""),
            space_name=space.get("name") or container.get("title", ""),
            url=_absolute_url(base, link),
            last_modified=item.get("lastModified") or version.get("when", ""),
            author=_display_name(history.get("createdBy"), version.get("by")),
        ))
    return results


def normalize_content_results(data: dict, base_url: str) -> list[SearchResult]:
    """Normalize a /rest/api/content listing payload."""
    base = (data.get("_links") or {}).get("base") or base_url
    results = []
    for item in data.get("results", []):
        space = item.get("space") or {}
        version = item.get("version") or {}
        history = item.get("history") or {}
        results.append(SearchResult(
            id=str(item.get("id", "")),
            title=item.get("title", ""),
            type=item.get("type", "page"),
            space_key=space.get("key", ""),
            space_name=space.get("name", ""),
            url=_absolute_url(base, (item.get("_links") or {}).get("webui", "")),
            last_modified=version.get("when", ""),
            author=_display_name(version.get("by"), history.get("createdBy")),
        ))
    return results


class SearchResolver:
    """Picks a search backend and normalizes whatever answers.

    CQL runs when there is a query or title, the content listing runs when a
    space key is known, and the first one that returns wins. Failures of
    either strategy are logged and absorbed; only when nothing answered does
    the caller see an error. An empty result is an answer.
    """

    def __init__(self, confluence_port: ConfluencePort, base_url: str):
        self._port = confluence_port
        self._base_url = base_url

    async def search(self, query: SearchQuery) -> SearchOutcome:
        if not query.has_criteria():
            raise InvalidArgumentError(
                "At least one search parameter (query, title, spaceKey, or spaceId) must be provided"
            )

        failures: list[StrategyFailure] = []
        space_key = query.space_key
        if not space_key and query.space_id:
            space_key = await self._resolve_space_key(query.space_id, failures)

        if query.query or query.title:
            cql = build_cql(query, space_key)
            logger.info("🔍 Strategy CQL: %s", cql)
            try:
                data = await self._port.search_cql(cql, limit=query.limit)
            except ConfluenceError as e:
                logger.warning("⚠️ CQL search failed (%s): %s", e.kind.value, e.message)
                failures.append(StrategyFailure(SearchMethod.CQL, e))
            else:
                results = normalize_cql_results(data, self._base_url)
                return self._outcome(results, data, SearchMethod.CQL, failures)

        if space_key:
            logger.info("🔍 Strategy Content API: space=%s, title=%s", space_key, query.title)
            try:
                data = await self._port.list_content(space_key, title=query.title, limit=query.limit)
            except ConfluenceError as e:
                logger.warning("⚠️ Content API search failed (%s): %s", e.kind.value, e.message)
                failures.append(StrategyFailure(SearchMethod.CONTENT_API, e))
            else:
                results = normalize_content_results(data, self._base_url)
                return self._outcome(results, data, SearchMethod.CONTENT_API, failures)

        logger.error("❌ No search strategy produced a result (%d failures)", len(failures))
        raise InvalidArgumentError(self._unavailable_message(failures))

    async def _resolve_space_key(self, space_id: str, failures: list[StrategyFailure]) -> str | None:
        try:
            space = await self._port.get_space(space_id)
        except ConfluenceError as e:
            logger.warning("⚠️ Space lookup failed for id=%s (%s): %s", space_id, e.kind.value, e.message)
            failures.append(StrategyFailure(None, e))
            return None
        logger.info("Space id %s resolved to key %s", space_id, space.key)
        return space.key or None

    @staticmethod
    def _outcome(
        results: list[SearchResult],
        data: dict,
        method: SearchMethod,
        failures: list[StrategyFailure],
    ) -> SearchOutcome:
        total = data.get("totalSize", data.get("size", len(results)))
        logger.info("✅ Search answered by %s: %d results", method.value, len(results))
        return SearchOutcome(results=results, total_size=int(total), method=method, failures=failures)

    @staticmethod
    def _unavailable_message(failures: list[StrategyFailure]) -> str:
        if not failures:
            return f"{SEARCH_UNAVAILABLE_MESSAGE}. No search strategy applies without a query, title, or resolvable space."
        attempts = "; ".join(f.describe() for f in failures)
        return f"{SEARCH_UNAVAILABLE_MESSAGE}. Attempts: {attempts}"
