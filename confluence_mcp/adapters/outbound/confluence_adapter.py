import logging
import re

import httpx

from confluence_mcp.domain.confluence import (
    BodyFormat,
    Comment,
    CommentPage,
    Page,
    Space,
    VersionRecord,
)
from confluence_mcp.domain.errors import (
    AuthenticationFailedError,
    ConflictError,
    ConfluenceError,
    InternalServerError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

# 400 responses whose message reports a stale version number
_VERSION_CONFLICT_PATTERN = re.compile(
    r"version.*(conflict|mismatch|increment|must be|current version|already)",
    re.IGNORECASE | re.DOTALL,
)


class ConfluenceAdapter:
    """Outbound adapter for the Confluence Cloud REST APIs.

    Talks to two surfaces under the same site: the resource-oriented v2 API
    (pages, spaces, footer comments, versions) and the legacy v1 API
    (content listing, CQL search). Every HTTP failure is mapped here, once,
    into a ``ConfluenceError`` subclass.
    """

    def __init__(
        self,
        site_name: str,
        api_token: str,
        email: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        site = re.sub(r"^https?://", "", site_name.strip()).rstrip("/")
        self.site_name = site
        self.wiki_base_url = f"https://{site}/wiki"
        self.api_v2_url = f"{self.wiki_base_url}/api/v2"
        self.api_v1_url = f"{self.wiki_base_url}/rest/api"
        self.api_token = api_token
        self.email = email
        self.timeout = timeout
        self._transport = transport

    @property
    def auth_scheme(self) -> str:
        return "basic" if self.email else "bearer"

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def create_page(
        self,
        space_id: str,
        title: str,
        body: str,
        parent_id: str | None = None,
    ) -> Page:
        """Create a page. Status is always `current`."""
        url = f"{self.api_v2_url}/pages"
        payload = {
            "spaceId": space_id,
            "status": "current",
            "title": title,
            "body": {"representation": "storage", "value": body},
        }
        if parent_id:
            payload["parentId"] = parent_id

        logger.info("🌐 Confluence page create: space_id=%s, title=%s, parent=%s", space_id, title, parent_id)
        data = await self._request("POST", url, json=payload)

        page = self._parse_page(data)
        logger.info("✅ Page created: id=%s, version=%d", page.id, page.version.number)
        return page

    async def get_page(
        self,
        page_id: str,
        body_format: BodyFormat = BodyFormat.STORAGE,
        version: int | None = None,
    ) -> Page:
        url = f"{self.api_v2_url}/pages/{page_id}"
        params: dict[str, str | int] = {"body-format": body_format.value}
        if version is not None:
            params["version"] = version

        logger.info("🌐 Confluence page fetch: page_id=%s, format=%s", page_id, body_format.value)
        data = await self._request("GET", url, params=params)

        page = self._parse_page(data, body_format)
        logger.info("Page fetched: id=%s, version=%d, body_len=%d", page.id, page.version.number, len(page.body))
        return page

    async def update_page(
        self,
        page_id: str,
        title: str,
        body: str,
        version_number: int,
        version_message: str = "",
    ) -> Page:
        """Update a page. version_number must be the current version + 1."""
        url = f"{self.api_v2_url}/pages/{page_id}"
        payload = {
            "id": page_id,
            "status": "current",
            "title": title,
            "body": {"representation": "storage", "value": body},
            "version": {"number": version_number, "message": version_message},
        }

        logger.info("🌐 Confluence page update: page_id=%s, version=%d", page_id, version_number)
        data = await self._request("PUT", url, json=payload)

        page = self._parse_page(data)
        logger.info("✅ Page updated: id=%s, version=%d", page.id, page.version.number)
        return page

    async def delete_page(self, page_id: str, draft: bool = False) -> None:
        url = f"{self.api_v2_url}/pages/{page_id}"
        params = {"draft": "true"} if draft else None

        logger.info("🌐 Confluence page delete: page_id=%s, draft=%s", page_id, draft)
        await self._request("DELETE", url, params=params)
        logger.info("✅ Page deleted: id=%s", page_id)

    async def get_page_versions(self, page_id: str, limit: int = 10) -> list[VersionRecord]:
        url = f"{self.api_v2_url}/pages/{page_id}/versions"
        params = {"limit": limit, "sort": "-modified-date"}

        logger.info("🌐 Confluence page versions: page_id=%s, limit=%d", page_id, limit)
        data = await self._request("GET", url, params=params)

        versions = [self._parse_version(item) for item in data.get("results", [])]
        logger.info("Versions fetched: %d", len(versions))
        return versions

    # ------------------------------------------------------------------
    # Spaces
    # ------------------------------------------------------------------

    async def get_spaces(self, limit: int = 25) -> list[Space]:
        url = f"{self.api_v2_url}/spaces"

        logger.info("🌐 Confluence spaces: limit=%d", limit)
        data = await self._request("GET", url, params={"limit": limit})

        spaces = [self._parse_space(item) for item in data.get("results", [])]
        logger.info("Spaces fetched: %d", len(spaces))
        return spaces

    async def get_space(self, space_id: str) -> Space:
        url = f"{self.api_v2_url}/spaces/{space_id}"
        logger.info("🌐 Confluence space lookup: space_id=%s", space_id)
        data = await self._request("GET", url)
        return self._parse_space(data)

    # ------------------------------------------------------------------
    # Footer comments
    # ------------------------------------------------------------------

    async def get_page_comments(
        self,
        page_id: str,
        limit: int = 25,
        cursor: str | None = None,
    ) -> CommentPage:
        url = f"{self.api_v2_url}/pages/{page_id}/footer-comments"
        params: dict[str, str | int] = {"limit": limit, "body-format": "storage"}
        if cursor:
            params["cursor"] = cursor

        logger.info("🌐 Confluence page comments: page_id=%s, limit=%d", page_id, limit)
        data = await self._request("GET", url, params=params)

        comments = [self._parse_comment(item, page_id) for item in data.get("results", [])]
        next_link = data.get("_links", {}).get("next")
        next_cursor = httpx.URL(next_link).params.get("cursor") if next_link else None
        logger.info("Comments fetched: %d (more=%s)", len(comments), bool(next_cursor))
        return CommentPage(comments=comments, next_cursor=next_cursor)

    async def add_comment(
        self,
        page_id: str,
        content: str,
        parent_id: str | None = None,
    ) -> Comment:
        url = f"{self.api_v2_url}/footer-comments"
        payload: dict = {"body": {"representation": "storage", "value": content}}
        # replies hang off the parent comment, not the page
        if parent_id:
            payload["parentCommentId"] = parent_id
        else:
            payload["pageId"] = page_id

        logger.info("🌐 Confluence comment add: page_id=%s, parent=%s", page_id, parent_id)
        data = await self._request("POST", url, json=payload)

        comment = self._parse_comment(data, page_id)
        logger.info("✅ Comment added: id=%s", comment.id)
        return comment

    async def update_comment(self, comment_id: str, content: str, version_number: int) -> Comment:
        url = f"{self.api_v2_url}/footer-comments/{comment_id}"
        payload = {
            "version": {"number": version_number},
            "body": {"representation": "storage", "value": content},
        }

        logger.info("🌐 Confluence comment update: comment_id=%s, version=%d", comment_id, version_number)
        data = await self._request("PUT", url, json=payload)

        comment = self._parse_comment(data, "")
        logger.info("✅ Comment updated: id=%s, version=%d", comment.id, comment.version.number)
        return comment

    async def delete_comment(self, comment_id: str) -> None:
        url = f"{self.api_v2_url}/footer-comments/{comment_id}"
        logger.info("🌐 Confluence comment delete: comment_id=%s", comment_id)
        await self._request("DELETE", url)
        logger.info("✅ Comment deleted: id=%s", comment_id)

    # ------------------------------------------------------------------
    # Legacy query API
    # ------------------------------------------------------------------

    async def search_cql(self, cql: str, limit: int = 25) -> dict:
        url = f"{self.api_v1_url}/search"
        params = {
            "cql": cql,
            "limit": limit,
            "expand": "content.space,content.version,content.history",
        }
        logger.info("🌐 Confluence CQL search: %s", cql)
        return await self._request("GET", url, params=params)

    async def list_content(
        self,
        space_key: str,
        title: str | None = None,
        limit: int = 25,
    ) -> dict:
        url = f"{self.api_v1_url}/content"
        params: dict[str, str | int] = {
            "spaceKey": space_key,
            "type": "page",
            "limit": limit,
            "expand": "space,version,history",
        }
        if title:
            params["title"] = title
        logger.info("🌐 Confluence content listing: space=%s, title=%s", space_key, title)
        return await self._request("GET", url, params=params)

    async def test_connection(self) -> bool:
        """Startup connectivity check. Never raises."""
        logger.info("Testing connection to Confluence API (%s, %s auth)...", self.site_name, self.auth_scheme)
        try:
            await self._request("GET", f"{self.api_v2_url}/spaces", params={"limit": 1})
        except ConfluenceError as e:
            logger.error("❌ Connection test failed: %s", e.message)
            return False
        logger.info("✅ Connection test successful")
        return True

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return an httpx.AsyncClient with auth headers and timeout applied."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        auth = None
        if self.email:
            auth = httpx.BasicAuth(self.email, self.api_token)
        else:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return httpx.AsyncClient(
            headers=headers,
            auth=auth,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        """Run one HTTP call and return the JSON body ({} when there is none)."""
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
                logger.debug("API Response: %d %s %s", response.status_code, method, url)
                response.raise_for_status()
                if response.status_code == 204 or not response.content:
                    return {}
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("❌ API Error: %d %s %s", e.response.status_code, method, url)
            logger.error("Response body: %s", e.response.text[:500])
            self._raise_confluence_error(e)
        except httpx.TimeoutException as e:
            logger.error("❌ Request timed out after %.0fs: %s %s", self.timeout, method, url)
            raise NetworkError(f"Network error: request timed out after {self.timeout:.0f}s ({url})") from e
        except httpx.TransportError as e:
            logger.error("❌ Network error: %s", str(e))
            raise NetworkError(f"Network error: {e} ({self.wiki_base_url})") from e
        except ValueError as e:
            logger.error("❌ Invalid JSON response: %s %s", method, url)
            raise InternalServerError(f"Invalid JSON response from Confluence: {e}") from e

    def _raise_confluence_error(self, e: httpx.HTTPStatusError) -> None:
        """Raise the ConfluenceError matching the HTTP status."""
        status = e.response.status_code
        message = _extract_error_message(e.response)
        if status == 401:
            raise AuthenticationFailedError(f"Authentication failed: {message}", status) from e
        elif status == 403:
            raise PermissionDeniedError(f"Access denied: {message}", status) from e
        elif status == 404:
            raise NotFoundError(f"Resource not found: {message}", status) from e
        elif status == 409:
            raise ConflictError(f"Version conflict: {message}", status) from e
        elif status == 429:
            raise RateLimitedError(f"Rate limit exceeded: {message}", status) from e
        elif status == 400 and _VERSION_CONFLICT_PATTERN.search(message):
            raise ConflictError(f"Version conflict: {message}", status) from e
        else:
            raise InternalServerError(f"API error {status}: {message}", status) from e

    # ------------------------------------------------------------------
    # Response parsing
    # ------------------------------------------------------------------

    def _build_url(self, data: dict) -> str:
        links = data.get("_links", {})
        webui = links.get("webui", "")
        if not webui:
            return ""
        if webui.startswith("http"):
            return webui
        base = links.get("base") or self.wiki_base_url
        return f"{base.rstrip('/')}{webui}"

    @staticmethod
    def _parse_version(data: dict | None) -> VersionRecord:
        data = data or {}
        return VersionRecord(
            number=int(data.get("number", 1)),
            message=data.get("message") or "",
            author_id=data.get("authorId") or "",
            created_at=data.get("createdAt") or "",
            minor_edit=bool(data.get("minorEdit", False)),
        )

    def _parse_page(self, data: dict, body_format: BodyFormat | None = None) -> Page:
        body_data = data.get("body") or {}
        fmt = body_format
        if fmt is None or fmt.value not in body_data:
            fmt = next(
                (f for f in (BodyFormat.STORAGE, BodyFormat.ATLAS_DOC_FORMAT) if f.value in body_data),
                body_format or BodyFormat.STORAGE,
            )
        body = (body_data.get(fmt.value) or {}).get("value") or ""
        return Page(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            space_id=str(data.get("spaceId", "")),
            status=data.get("status", ""),
            version=self._parse_version(data.get("version")),
            body=body,
            body_format=fmt,
            author_id=data.get("authorId") or "",
            created_at=data.get("createdAt") or "",
            parent_id=data.get("parentId"),
            url=self._build_url(data),
        )

    def _parse_space(self, data: dict) -> Space:
        description = ((data.get("description") or {}).get("plain") or {}).get("value") or ""
        homepage_id = data.get("homepageId")
        return Space(
            id=str(data.get("id", "")),
            key=data.get("key", ""),
            name=data.get("name", ""),
            type=data.get("type", ""),
            status=data.get("status", ""),
            author_id=data.get("authorId") or "",
            created_at=data.get("createdAt") or "",
            homepage_id=str(homepage_id) if homepage_id else None,
            description=description,
            url=self._build_url(data),
        )

    def _parse_comment(self, data: dict, page_id: str) -> Comment:
        body = ((data.get("body") or {}).get("storage") or {}).get("value") or ""
        return Comment(
            id=str(data.get("id", "")),
            page_id=str(data.get("pageId") or page_id),
            version=self._parse_version(data.get("version")),
            body=body,
            title=data.get("title", ""),
            status=data.get("status", ""),
            parent_comment_id=data.get("parentCommentId"),
            url=self._build_url(data),
        )


def _extract_error_message(response: httpx.Response) -> str:
    """Pull a readable message out of a Confluence error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        errors = data.get("errors") or []
        if errors and isinstance(errors[0], dict):
            first = errors[0]
            return str(first.get("title") or first.get("detail") or first.get("code") or response.reason_phrase)
    return response.text[:200] or response.reason_phrase
