import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from mcp import types
from mcp.server import Server
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, METHOD_NOT_FOUND, CallToolResult, ErrorData, TextContent, Tool
from pydantic import ValidationError

from confluence_mcp.adapters.inbound.mcp import formatters
from confluence_mcp.adapters.inbound.mcp.schemas import (
    AddCommentInput,
    CreatePageInput,
    DeleteCommentInput,
    DeletePageInput,
    GetPageCommentsInput,
    GetPageContentInput,
    GetPageVersionsInput,
    GetSpacesInput,
    SearchPagesInput,
    ToolInput,
    UpdateCommentInput,
    UpdatePageInput,
)
from confluence_mcp.configuration.container import Container
from confluence_mcp.domain.confluence import BodyFormat, ContentFormat, SearchQuery, SortBy
from confluence_mcp.domain.errors import (
    ConfluenceError,
    ErrorKind,
    InvalidArgumentError,
    ToolNotFoundError,
)

logger = logging.getLogger(__name__)

# long bodies are cut short in the call log
_TRUNCATE_FIELDS = {"content"}
_TRUNCATE_LENGTH = 80

_COMMON_HINTS = {
    ErrorKind.INVALID_ARGUMENT: "💡 Check the tool parameters and try again",
    ErrorKind.AUTHENTICATION_FAILED: "💡 Check CONFLUENCE_API_TOKEN (and CONFLUENCE_EMAIL when using basic auth)",
    ErrorKind.PERMISSION_DENIED: "💡 The account behind the API token lacks permission for this resource",
    ErrorKind.NOT_FOUND: "💡 Verify the ID exists and that you have access to it",
    ErrorKind.RATE_LIMITED: "💡 Confluence rate limit reached - wait a moment before retrying",
    ErrorKind.CONFLICT: "💡 Version conflict - someone else may have edited this; fetch the latest version and retry",
    ErrorKind.NETWORK_ERROR: "💡 Could not reach Confluence - check CONFLUENCE_SITE_NAME and your network connection",
}
_DEFAULT_HINT = "💡 Unexpected Confluence API error - check the server logs for details"


@dataclass
class ToolResponse:
    """Outcome of one tool call: text for the agent plus the value behind it."""

    segments: list[str]
    is_error: bool = False
    data: Any = None
    error_kind: ErrorKind | None = None

    @property
    def text(self) -> str:
        return "\n".join(self.segments)

    def to_call_tool_result(self) -> CallToolResult:
        return CallToolResult(
            content=[TextContent(type="text", text=segment) for segment in self.segments],
            isError=self.is_error,
        )


Handler = Callable[[Container, Any], Awaitable[ToolResponse]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[ToolInput]
    handler: Handler
    error_label: str
    hints: dict[ErrorKind, str] = field(default_factory=dict)

    def definition(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(by_alias=True),
        )

    def hint_for(self, kind: ErrorKind) -> str:
        return self.hints.get(kind) or _COMMON_HINTS.get(kind, _DEFAULT_HINT)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def _create_page(container: Container, params: CreatePageInput) -> ToolResponse:
    page = await container.create_page_use_case.execute(
        space_id=params.space_id,
        title=params.title,
        content=params.content,
        parent_id=params.parent_id,
        content_format=ContentFormat(params.content_format),
    )
    return ToolResponse(formatters.format_created_page(page), data=page)


async def _get_page_content(container: Container, params: GetPageContentInput) -> ToolResponse:
    page = await container.get_page_content_use_case.execute(
        page_id=params.page_id,
        body_format=BodyFormat(params.body_format),
        version=params.version,
    )
    return ToolResponse(formatters.format_page_content(page), data=page)


async def _update_page(container: Container, params: UpdatePageInput) -> ToolResponse:
    result = await container.update_page_use_case.execute(
        page_id=params.page_id,
        version=params.version,
        title=params.title,
        content=params.content,
        version_message=params.version_message,
        content_format=ContentFormat(params.content_format),
    )
    return ToolResponse(formatters.format_updated_page(result), data=result)


async def _delete_page(container: Container, params: DeletePageInput) -> ToolResponse:
    deleted = await container.delete_page_use_case.execute(page_id=params.page_id, draft=params.draft)
    return ToolResponse(formatters.format_deleted_page(deleted), data=deleted)


async def _get_spaces(container: Container, params: GetSpacesInput) -> ToolResponse:
    spaces = await container.get_spaces_use_case.execute(limit=params.limit)
    return ToolResponse(formatters.format_spaces(spaces), data=spaces)


async def _search_pages(container: Container, params: SearchPagesInput) -> ToolResponse:
    query = SearchQuery(
        query=params.query or None,
        title=params.title or None,
        space_key=params.space_key or None,
        space_id=params.space_id or None,
        limit=params.limit,
        sort_by=SortBy(params.sort_by),
    )
    outcome = await container.search_pages_use_case.execute(query)
    return ToolResponse(formatters.format_search(outcome, query), data=outcome)


async def _get_page_versions(container: Container, params: GetPageVersionsInput) -> ToolResponse:
    versions = await container.get_page_versions_use_case.execute(page_id=params.page_id, limit=params.limit)
    return ToolResponse(formatters.format_versions(params.page_id, versions, params.limit), data=versions)


async def _get_page_comments(container: Container, params: GetPageCommentsInput) -> ToolResponse:
    page = await container.get_page_comments_use_case.execute(
        page_id=params.page_id, limit=params.limit, cursor=params.cursor,
    )
    return ToolResponse(formatters.format_comments(params.page_id, page, params.limit), data=page)


async def _add_comment(container: Container, params: AddCommentInput) -> ToolResponse:
    comment = await container.add_comment_use_case.execute(
        page_id=params.page_id,
        content=params.content,
        parent_id=params.parent_id,
        content_format=ContentFormat(params.content_format),
    )
    return ToolResponse(formatters.format_added_comment(comment, params.content, params.parent_id), data=comment)


async def _update_comment(container: Container, params: UpdateCommentInput) -> ToolResponse:
    result = await container.update_comment_use_case.execute(
        comment_id=params.comment_id,
        content=params.content,
        version=params.version,
        content_format=ContentFormat(params.content_format),
    )
    return ToolResponse(formatters.format_updated_comment(result, params.content), data=result)


async def _delete_comment(container: Container, params: DeleteCommentInput) -> ToolResponse:
    comment_id = await container.delete_comment_use_case.execute(comment_id=params.comment_id)
    return ToolResponse(formatters.format_deleted_comment(comment_id), data=comment_id)


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="createPage",
        description=(
            "Create a new Confluence page in a specified space. "
            "WORKFLOW: Use getSpaces first to get space ID, then createPage to create the page."
        ),
        input_model=CreatePageInput,
        handler=_create_page,
        error_label="Failed to create page",
        hints={
            ErrorKind.NOT_FOUND: "💡 Space or parent page not found - use getSpaces to get a valid space ID",
            ErrorKind.PERMISSION_DENIED: "💡 You need create permission in this space",
        },
    ),
    ToolSpec(
        name="getPageContent",
        description=(
            "Retrieve the content and metadata of a Confluence page by ID. "
            "Optionally fetch a historical version."
        ),
        input_model=GetPageContentInput,
        handler=_get_page_content,
        error_label="Failed to get page content",
        hints={
            ErrorKind.NOT_FOUND: "💡 Page not found - use searchPages to find the page ID",
        },
    ),
    ToolSpec(
        name="updatePage",
        description=(
            "Update title and/or content of an existing Confluence page. "
            "WORKFLOW: Use getPageVersions first and pass the next version number (current + 1)."
        ),
        input_model=UpdatePageInput,
        handler=_update_page,
        error_label="Failed to update page",
        hints={
            ErrorKind.CONFLICT: "💡 Version conflict - use getPageVersions to get the current version, then retry with current + 1",
            ErrorKind.NOT_FOUND: "💡 Page not found - use searchPages to find the page ID",
            ErrorKind.PERMISSION_DENIED: "💡 You need edit permission on this page",
        },
    ),
    ToolSpec(
        name="deletePage",
        description=(
            "Delete a Confluence page permanently. This action cannot be undone. "
            "WORKFLOW: Use searchPages or getPageContent first to confirm page ID, then call deletePage."
        ),
        input_model=DeletePageInput,
        handler=_delete_page,
        error_label="Failed to delete page",
        hints={
            ErrorKind.NOT_FOUND: "💡 Page not found - it may already have been deleted",
            ErrorKind.PERMISSION_DENIED: "💡 You need delete permission in this space",
        },
    ),
    ToolSpec(
        name="getSpaces",
        description="List available Confluence spaces with their IDs, keys and homepages",
        input_model=GetSpacesInput,
        handler=_get_spaces,
        error_label="Failed to get spaces",
    ),
    ToolSpec(
        name="searchPages",
        description=(
            "Search for Confluence pages across spaces using text queries or filters. "
            "Supports CQL search and content API fallback. Returns page IDs for use with other tools. "
            "WORKFLOW: Use this as the first step to find pages, then use page IDs with "
            "getPageContent, updatePage, deletePage, or comment tools."
        ),
        input_model=SearchPagesInput,
        handler=_search_pages,
        error_label="Search failed",
        hints={
            ErrorKind.INVALID_ARGUMENT: "💡 Provide query, title, spaceKey or spaceId; or browse with getSpaces",
        },
    ),
    ToolSpec(
        name="getPageVersions",
        description=(
            "Get version history metadata for a Confluence page. Returns version numbers, dates, and messages. "
            "Use this before updatePage to get current version number, or to explore page edit history."
        ),
        input_model=GetPageVersionsInput,
        handler=_get_page_versions,
        error_label="Failed to get page versions",
        hints={
            ErrorKind.NOT_FOUND: "💡 Page not found - use searchPages to find the page ID",
        },
    ),
    ToolSpec(
        name="getPageComments",
        description=(
            "Retrieve footer comments for a specific Confluence page. Returns comment IDs, versions, "
            "content previews, authors, and creation dates."
        ),
        input_model=GetPageCommentsInput,
        handler=_get_page_comments,
        error_label="Failed to get page comments",
        hints={
            ErrorKind.NOT_FOUND: "💡 Page not found - use searchPages to find the page ID",
        },
    ),
    ToolSpec(
        name="addComment",
        description=(
            "Add a new footer comment to a Confluence page. Supports both top-level comments and replies "
            "to existing comments. WORKFLOW: For replies, use getPageComments first to get parent comment ID."
        ),
        input_model=AddCommentInput,
        handler=_add_comment,
        error_label="Failed to add comment",
        hints={
            ErrorKind.NOT_FOUND: "💡 Page or parent comment not found - check the IDs with getPageComments",
            ErrorKind.PERMISSION_DENIED: "💡 You need comment permission on this page",
        },
    ),
    ToolSpec(
        name="updateComment",
        description=(
            "Update the content of an existing Confluence comment. Requires the comment ID and current "
            "version number. WORKFLOW: Use getPageComments first to get current version, then call "
            "updateComment with that version."
        ),
        input_model=UpdateCommentInput,
        handler=_update_comment,
        error_label="Failed to update comment",
        hints={
            ErrorKind.CONFLICT: "💡 Version conflict - use getPageComments to get the comment's current version",
            ErrorKind.NOT_FOUND: "💡 Comment not found - use getPageComments to list comment IDs",
            ErrorKind.PERMISSION_DENIED: "💡 You can only edit comments you are allowed to modify",
        },
    ),
    ToolSpec(
        name="deleteComment",
        description=(
            "Permanently delete a Confluence comment. This action cannot be undone and will remove the "
            "comment and all its replies. WORKFLOW: Use getPageComments first to get comment ID."
        ),
        input_model=DeleteCommentInput,
        handler=_delete_comment,
        error_label="Failed to delete comment",
        hints={
            ErrorKind.NOT_FOUND: "💡 Comment not found - it may already have been deleted",
        },
    ),
)


def _validation_message(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        message = detail["msg"].removeprefix("Value error, ")
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def _mask_arguments(arguments: dict) -> dict:
    masked = {}
    for key, value in arguments.items():
        if key in _TRUNCATE_FIELDS and isinstance(value, str) and len(value) > _TRUNCATE_LENGTH:
            masked[key] = f"{value[:_TRUNCATE_LENGTH]}... ({len(value)} chars)"
        else:
            masked[key] = value
    return masked


class ToolRegistry:
    """Name → ToolSpec lookup and the dispatch path shared by every tool."""

    def __init__(self, container: Container, specs: tuple[ToolSpec, ...] = TOOL_SPECS):
        self._container = container
        self._specs = {spec.name: spec for spec in specs}

    def list_tools(self) -> list[Tool]:
        return [spec.definition() for spec in self._specs.values()]

    def get(self, name: str) -> ToolSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    async def dispatch(self, name: str, arguments: dict | None) -> ToolResponse:
        """Validate arguments, run the handler and render the result.

        Raises:
            ToolNotFoundError: no tool is registered under ``name``.
        """
        spec = self.get(name)

        try:
            params = spec.input_model.model_validate(arguments or {})
        except ValidationError as e:
            error = InvalidArgumentError(_validation_message(e))
            logger.warning("⚠️ %s: invalid arguments: %s", name, error.message)
            return self._error_response(spec, error)

        try:
            response = await spec.handler(self._container, params)
        except ConfluenceError as e:
            logger.error("❌ %s failed (%s): %s", name, e.kind.value, e.message)
            return self._error_response(spec, e)

        logger.info("✅ %s completed", name)
        return response

    @staticmethod
    def _error_response(spec: ToolSpec, error: ConfluenceError) -> ToolResponse:
        return ToolResponse(
            segments=[
                f"❌ {spec.error_label}: {error.message}",
                f"🏷️ Error type: {error.kind.value}",
                spec.hint_for(error.kind),
            ],
            is_error=True,
            error_kind=error.kind,
        )


def register_tools(app: Server, container: Container) -> ToolRegistry:
    """Install the tools/list and tools/call handlers on ``app``.

    tools/call is registered directly in ``app.request_handlers`` instead of
    through ``@app.call_tool()``: the SDK decorator turns every exception into
    an ``isError`` result, so an unknown tool or an internal failure would
    never reach the client as a protocol error.
    """
    registry = ToolRegistry(container)

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        name = request.params.name
        arguments = request.params.arguments or {}

        logger.info("=" * 60)
        logger.info("🔧 Tool call: %s", name)
        logger.info("Arguments: %s", _mask_arguments(arguments))
        logger.info("=" * 60)

        try:
            response = await registry.dispatch(name, arguments)
        except ToolNotFoundError as e:
            logger.error("❌ %s", e.message)
            raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=e.message)) from e
        except Exception as e:
            logger.exception("❌ Unexpected error in tool %s", name)
            raise McpError(ErrorData(code=INTERNAL_ERROR, message=str(e))) from e

        return types.ServerResult(response.to_call_tool_result())

    app.request_handlers[types.CallToolRequest] = call_tool

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        return registry.list_tools()

    return registry
