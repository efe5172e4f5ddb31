from typing import Protocol

from confluence_mcp.domain.confluence import (
    BodyFormat,
    Comment,
    CommentPage,
    Page,
    Space,
    VersionRecord,
)


class ConfluencePort(Protocol):
    """Confluence Cloud service contract (Port).

    Implementations raise ``ConfluenceError`` subclasses only.
    """

    async def create_page(
        self,
        space_id: str,
        title: str,
        body: str,
        parent_id: str | None = None,
    ) -> Page:
        ...

    async def get_page(
        self,
        page_id: str,
        body_format: BodyFormat = BodyFormat.STORAGE,
        version: int | None = None,
    ) -> Page:
        ...

    async def update_page(
        self,
        page_id: str,
        title: str,
        body: str,
        version_number: int,
        version_message: str = "",
    ) -> Page:
        """version_number must be the page's current version + 1."""
        ...

    async def delete_page(self, page_id: str, draft: bool = False) -> None:
        ...

    async def get_spaces(self, limit: int = 25) -> list[Space]:
        ...

    async def get_space(self, space_id: str) -> Space:
        ...

    async def get_page_versions(self, page_id: str, limit: int = 10) -> list[VersionRecord]:
        ...

    async def get_page_comments(
        self,
        page_id: str,
        limit: int = 25,
        cursor: str | None = None,
    ) -> CommentPage:
        ...

    async def add_comment(
        self,
        page_id: str,
        content: str,
        parent_id: str | None = None,
    ) -> Comment:
        ...

    async def update_comment(self, comment_id: str, content: str, version_number: int) -> Comment:
        ...

    async def delete_comment(self, comment_id: str) -> None:
        ...

    async def search_cql(self, cql: str, limit: int = 25) -> dict:
        """Legacy CQL search. Returns the raw response payload."""
        ...

    async def list_content(
        self,
        space_key: str,
        title: str | None = None,
        limit: int = 25,
    ) -> dict:
        """Legacy content listing. Returns the raw response payload."""
        ...
