"""Input models for the Confluence tools.

Each model is both the validator run at the dispatch boundary and the source
of the JSON schema published through ``list_tools``. Field aliases carry the
camelCase parameter names agents call the tools with.
"""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_TAGS = re.compile(r"<[^>]*>")

ContentFormatName = Literal["storage", "markdown"]

_CONTENT_FORMAT_DESCRIPTION = (
    "Format of the supplied content: 'storage' (Confluence storage format, default) "
    "or 'markdown' (converted to storage format before sending)"
)


def strip_tags(content: str) -> str:
    return _TAGS.sub("", content).strip()


class ToolInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


class _CommentInput(ToolInput):
    """Comment bodies must contain text once markup is stripped."""

    @field_validator("content", check_fields=False)
    @classmethod
    def _content_has_text(cls, value: str) -> str:
        if not strip_tags(value):
            raise ValueError("content cannot be empty")
        return value


class CreatePageInput(ToolInput):
    space_id: str = Field(
        ..., alias="spaceId", min_length=1,
        description="Confluence space ID where the page will be created",
    )
    title: str = Field(..., min_length=1, description="Title of the new page")
    content: str = Field(
        ..., min_length=1,
        description="Page content in Confluence storage format (XML-like HTML)",
    )
    parent_id: str | None = Field(
        default=None, alias="parentId",
        description="Optional parent page ID for creating child pages",
    )
    content_format: ContentFormatName = Field(
        default="storage", alias="contentFormat", description=_CONTENT_FORMAT_DESCRIPTION,
    )


class GetPageContentInput(ToolInput):
    page_id: str = Field(
        ..., alias="pageId", min_length=1,
        description="Confluence page ID to retrieve content from",
    )
    body_format: Literal["storage", "atlas_doc_format"] = Field(
        default="storage", alias="bodyFormat",
        description="Content format to retrieve (default: storage)",
    )
    version: int | None = Field(
        default=None, ge=1,
        description="Optional historical version number to retrieve (default: latest)",
    )


class UpdatePageInput(ToolInput):
    page_id: str = Field(..., alias="pageId", min_length=1, description="Confluence page ID to update")
    version: int = Field(
        ..., ge=1,
        description="Next version number: the page's current version + 1 (see getPageVersions). "
                    "A stale number is rejected as a version conflict",
    )
    title: str | None = Field(
        default=None, description="New page title (optional if only updating content)",
    )
    content: str | None = Field(
        default=None,
        description="New page content in Confluence storage format (optional if only updating title)",
    )
    version_message: str | None = Field(
        default=None, alias="versionMessage",
        description="Optional message describing the changes made (default: 'Updated page via MCP')",
    )
    content_format: ContentFormatName = Field(
        default="storage", alias="contentFormat", description=_CONTENT_FORMAT_DESCRIPTION,
    )

    @model_validator(mode="after")
    def _title_or_content(self) -> "UpdatePageInput":
        if not self.title and not self.content:
            raise ValueError("At least one of title or content must be provided for update")
        return self


class DeletePageInput(ToolInput):
    page_id: str = Field(..., alias="pageId", min_length=1, description="Confluence page ID to delete")
    draft: bool = Field(
        default=False,
        description="Delete the page's draft instead of the published page (default: false)",
    )


class GetSpacesInput(ToolInput):
    limit: int = Field(
        default=25, ge=1, le=250,
        description="Maximum number of spaces to return (default: 25, max: 250)",
    )


class SearchPagesInput(ToolInput):
    query: str | None = Field(
        default=None,
        description="Search text to find in page titles and content (supports partial matches)",
    )
    title: str | None = Field(
        default=None,
        description="Search specifically in page titles (alternative to query, supports partial matches)",
    )
    space_key: str | None = Field(
        default=None, alias="spaceKey",
        description='Limit search to specific space key (e.g., "DOCS") - improves search accuracy',
    )
    space_id: str | None = Field(
        default=None, alias="spaceId",
        description="Limit search to specific space ID (alternative to spaceKey, resolved to its key)",
    )
    limit: int = Field(
        default=25, ge=1, le=100,
        description="Maximum number of results to return (default: 25, max: 100)",
    )
    sort_by: Literal["relevance", "title", "created", "modified"] = Field(
        default="relevance", alias="sortBy",
        description="Sort order hint for results (default: relevance for best matches)",
    )


class GetPageVersionsInput(ToolInput):
    page_id: str = Field(
        ..., alias="pageId", min_length=1,
        description="Confluence page ID to get version history for",
    )
    limit: int = Field(
        default=10, ge=1, le=50,
        description="Maximum number of versions to return (default: 10, max: 50)",
    )


class GetPageCommentsInput(ToolInput):
    page_id: str = Field(
        ..., alias="pageId", min_length=1,
        description="The ID of the Confluence page to get comments from",
    )
    limit: int = Field(
        default=25, ge=1, le=100,
        description="Maximum number of comments to return (default: 25, max: 100)",
    )
    cursor: str | None = Field(
        default=None,
        description="Pagination cursor for retrieving next batch of comments (optional)",
    )


class AddCommentInput(_CommentInput):
    page_id: str = Field(
        ..., alias="pageId", min_length=1,
        description="The ID of the Confluence page to add the comment to",
    )
    content: str = Field(
        ..., min_length=1,
        description='The comment content in Confluence storage format (HTML). Example: "<p>This is a comment</p>"',
    )
    parent_id: str | None = Field(
        default=None, alias="parentId",
        description="Optional ID of parent comment to reply to (creates a threaded reply)",
    )
    content_format: ContentFormatName = Field(
        default="storage", alias="contentFormat", description=_CONTENT_FORMAT_DESCRIPTION,
    )


class UpdateCommentInput(_CommentInput):
    comment_id: str = Field(
        ..., alias="commentId", min_length=1, description="The ID of the comment to update",
    )
    content: str = Field(
        ..., min_length=1,
        description='The new comment content in Confluence storage format (HTML). Example: "<p>Updated comment text</p>"',
    )
    version: int = Field(
        ..., ge=1,
        description="The current version number of the comment (the server sends version + 1). "
                    "Get it from getPageComments",
    )
    content_format: ContentFormatName = Field(
        default="storage", alias="contentFormat", description=_CONTENT_FORMAT_DESCRIPTION,
    )


class DeleteCommentInput(ToolInput):
    comment_id: str = Field(
        ..., alias="commentId", min_length=1, description="The ID of the comment to delete",
    )
