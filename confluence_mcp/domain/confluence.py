from dataclasses import dataclass, field
from enum import Enum

from confluence_mcp.domain.errors import ConfluenceError


class BodyFormat(str, Enum):
    STORAGE = "storage"
    ATLAS_DOC_FORMAT = "atlas_doc_format"


class ContentFormat(str, Enum):
    """Format of body text supplied by the caller"""
    STORAGE = "storage"
    MARKDOWN = "markdown"


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    TITLE = "title"
    CREATED = "created"
    MODIFIED = "modified"


class SearchMethod(str, Enum):
    """Backend strategy that answered a search"""
    CQL = "CQL"
    CONTENT_API = "Content API"


@dataclass(frozen=True)
class VersionRecord:
    number: int
    message: str = ""
    author_id: str = ""
    created_at: str = ""
    minor_edit: bool = False


@dataclass(frozen=True)
class Page:
    """Confluence page entity"""
    id: str
    title: str
    space_id: str
    status: str
    version: VersionRecord
    body: str = ""
    body_format: BodyFormat = BodyFormat.STORAGE
    author_id: str = ""
    created_at: str = ""
    parent_id: str | None = None
    url: str = ""


@dataclass(frozen=True)
class Space:
    id: str
    key: str
    name: str
    type: str = ""
    status: str = ""
    author_id: str = ""
    created_at: str = ""
    homepage_id: str | None = None
    description: str = ""
    url: str = ""


@dataclass(frozen=True)
class Comment:
    """Footer comment on a page (storage-format body only)"""
    id: str
    page_id: str
    version: VersionRecord
    body: str = ""
    title: str = ""
    status: str = ""
    parent_comment_id: str | None = None
    url: str = ""


@dataclass(frozen=True)
class CommentPage:
    comments: list[Comment]
    next_cursor: str | None = None


@dataclass(frozen=True)
class SearchQuery:
    """Search parameter bundle. Never persisted."""
    query: str | None = None
    title: str | None = None
    space_key: str | None = None
    space_id: str | None = None
    limit: int = 25
    sort_by: SortBy = SortBy.RELEVANCE

    def has_criteria(self) -> bool:
        return any((self.query, self.title, self.space_key, self.space_id))


@dataclass(frozen=True)
class SearchResult:
    """Search hit normalized across backend strategies"""
    id: str
    title: str
    type: str = "page"
    space_key: str = ""
    space_name: str = ""
    url: str = ""
    last_modified: str = ""
    author: str = ""


@dataclass(frozen=True)
class StrategyFailure:
    method: SearchMethod | None
    error: ConfluenceError

    def describe(self) -> str:
        label = self.method.value if self.method else "Space lookup"
        return f"{label}: {self.error.kind.value} - {self.error.message}"


@dataclass(frozen=True)
class SearchOutcome:
    results: list[SearchResult]
    total_size: int
    method: SearchMethod
    failures: list[StrategyFailure] = field(default_factory=list)


@dataclass(frozen=True)
class PageUpdateResult:
    previous: Page
    page: Page
    changes: list[str]
    version_message: str


@dataclass(frozen=True)
class DeletedPage:
    page_id: str
    title: str
    space_id: str
    draft: bool = False


@dataclass(frozen=True)
class CommentUpdateResult:
    comment: Comment
    previous_version: int
