"""Text rendering for tool results.

Use cases hand back domain values; these functions turn them into the ordered
text segments an agent reads. Nothing here talks to Confluence.
"""

from datetime import datetime

from confluence_mcp.adapters.inbound.mcp.schemas import strip_tags
from confluence_mcp.domain.confluence import (
    Comment,
    CommentPage,
    CommentUpdateResult,
    DeletedPage,
    Page,
    PageUpdateResult,
    SearchOutcome,
    SearchQuery,
    Space,
    VersionRecord,
)

_PREVIEW_LENGTH = 100


def format_date(value: str, with_time: bool = False) -> str:
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M" if with_time else "%Y-%m-%d")


def preview(content: str, length: int = _PREVIEW_LENGTH) -> str:
    text = strip_tags(content)
    if not text:
        return "[No content]"
    return text[:length] + ("..." if len(text) > length else "")


def _link(url: str) -> str:
    return url or "View in Confluence"


def format_created_page(page: Page) -> list[str]:
    return [
        f'✅ Page "{page.title}" created successfully!',
        f"📄 Page ID: {page.id}",
        f"🔗 View page: {_link(page.url)}",
        f"📊 Page details: Space ID {page.space_id}, Version {page.version.number}",
    ]


def format_page_content(page: Page) -> list[str]:
    return [
        f'📄 Page: "{page.title}"',
        f"🆔 Page ID: {page.id}",
        f"🏠 Space ID: {page.space_id}",
        f"📊 Status: {page.status} | Version: {page.version.number}",
        f"👤 Author: {page.author_id or 'Unknown'}",
        f"📅 Created: {format_date(page.created_at)}",
        f"🔗 View page: {_link(page.url)}",
        f"📝 Content ({page.body_format.value}):",
        page.body or "No content available",
    ]


def format_updated_page(result: PageUpdateResult) -> list[str]:
    page = result.page
    changes = ", ".join(result.changes) if result.changes else "Page updated"
    return [
        f'✅ Page "{page.title}" updated successfully!',
        f"📄 Page ID: {page.id}",
        f"📊 Version: {result.previous.version.number} → {page.version.number}",
        f"🔄 Changes: {changes}",
        f"🔗 View page: {_link(page.url)}",
        f"💬 Update message: {result.version_message}",
    ]


def format_deleted_page(deleted: DeletedPage) -> list[str]:
    action = "Draft deleted" if deleted.draft else "Deleted"
    return [
        f'✅ Page "{deleted.title}" deleted successfully!',
        f"📄 Deleted Page ID: {deleted.page_id}",
        f"🏠 From Space ID: {deleted.space_id}",
        f"🗑️ Action: {action}",
        "⚠️  Note: This action cannot be undone through the API",
    ]


def format_spaces(spaces: list[Space]) -> list[str]:
    if not spaces:
        return [
            "📂 No spaces found or no access to any spaces",
            "💡 Tip: Check your API token permissions",
        ]

    segments = [f"📂 Found {len(spaces)} Confluence space{'s' if len(spaces) > 1 else ''}:"]
    for index, space in enumerate(spaces, 1):
        segments.append(f"{index}. 📖 {space.name}")
        segments.append(f"   🆔 Space ID: {space.id}")
        segments.append(f"   🔑 Space Key: {space.key}")
        segments.append(f"   📊 Type: {space.type} | Status: {space.status}")
        if space.homepage_id:
            segments.append(f"   🏠 Homepage ID: {space.homepage_id}")
        segments.append(f"   🔗 View: {_link(space.url)}")
    segments.extend([
        "💡 Usage Tips:",
        "• Use Space ID for creating pages with createPage tool",
        "• Use Space Key to scope searchPages",
        "• Homepage ID can be used as parentId for child pages",
    ])
    return segments


def format_search(outcome: SearchOutcome, query: SearchQuery) -> list[str]:
    method_line = f"🔧 Search method: {outcome.method.value}"
    fallback_lines = [f"⚠️ Fallback after: {failure.describe()}" for failure in outcome.failures]

    if not outcome.results:
        criteria = {
            "query": query.query,
            "title": query.title,
            "spaceKey": query.space_key,
            "spaceId": query.space_id,
            "sortBy": query.sort_by.value,
        }
        shown = ", ".join(f"{k}={v!r}" for k, v in criteria.items() if v)
        return [
            "🔍 No pages found matching your search criteria",
            f"📋 Search parameters: {shown}",
            "💡 Try: broader search terms, check space access, or use getSpaces to explore available spaces",
            method_line,
            *fallback_lines,
        ]

    lines = []
    for index, result in enumerate(outcome.results, 1):
        line = f'  {index}. "{result.title}" (ID: {result.id})'
        if result.space_key:
            line += f" [{result.space_key}]"
        if result.last_modified:
            line += f" - Modified: {format_date(result.last_modified)}"
        lines.append(line)

    return [
        f"🔍 Search Results: Found {outcome.total_size} pages",
        f"📊 Showing {len(outcome.results)} results (limit: {query.limit}, sorted by: {query.sort_by.value})",
        method_line,
        *fallback_lines,
        "📋 Results:",
        *lines,
        "💡 Usage: Use page IDs with getPageContent, updatePage, or deletePage tools",
    ]


def format_versions(page_id: str, versions: list[VersionRecord], limit: int) -> list[str]:
    if not versions:
        return [
            f"📚 No version history found for page {page_id}",
            "💡 This might be a new page with only one version, or the page doesn't exist",
        ]

    latest = versions[0]
    plural = "" if len(versions) == 1 else "s"
    segments = [
        f"📚 Version History for Page {page_id}",
        f"📊 Found {len(versions)} version{plural} (showing latest {min(limit, len(versions))})",
        f"🔢 Current Version: {latest.number}",
        "📋 Version Details:",
    ]
    for index, version in enumerate(versions):
        marker = "→" if index == 0 else " "
        line = f"  {marker} Version {version.number} - {format_date(version.created_at, with_time=True)}"
        if version.message:
            line += f' - "{version.message}"'
        if index == 0:
            line += " (CURRENT)"
        segments.append(line)
    segments.extend([
        f"💡 Usage: For updatePage, use version {latest.number + 1} (next version)",
        f"🔍 Note: For historical content, use getPageContent with version={latest.number}",
    ])
    return segments


def format_comments(page_id: str, page: CommentPage, limit: int) -> list[str]:
    if not page.comments:
        return [
            f"💬 No comments found on page {page_id}",
            "📋 The page exists but has no footer comments yet",
            "💡 Use addComment tool to start a conversation on this page",
        ]

    segments = [
        f"💬 Page Comments: Found {len(page.comments)} comment(s)",
        f"📋 Comments on page {page_id} (limit: {limit})",
        "📝 Comment List:",
    ]
    for index, comment in enumerate(page.comments, 1):
        segments.append(
            f"  {index}. Comment ID: {comment.id} (v{comment.version.number})\n"
            f"     Author: {comment.version.author_id or 'Unknown Author'} | "
            f"Created: {format_date(comment.version.created_at)}\n"
            f"     Content: {preview(comment.body)}"
        )
    if page.next_cursor:
        segments.append(f"💡 More comments available - call again with cursor={page.next_cursor}")
    else:
        segments.append("📄 All comments displayed")
    segments.append("💡 Usage: Use comment IDs with updateComment or deleteComment tools")
    return segments


def format_added_comment(comment: Comment, content: str, parent_id: str | None) -> list[str]:
    segments = [
        f"✅ Comment added successfully{' (reply)' if parent_id else ''}",
        "📋 Comment Details:",
        f"   ID: {comment.id}",
        f"   Page: {comment.page_id}",
        f"   Version: {comment.version.number}",
        f"   Created: {format_date(comment.version.created_at, with_time=True)}",
    ]
    if parent_id:
        segments.append(f"   Parent Comment: {parent_id}")
    segments.extend([
        f"   Content Preview: {preview(content)}",
        f"💡 Usage: Use comment ID {comment.id} with updateComment or deleteComment tools",
    ])
    return segments


def format_updated_comment(result: CommentUpdateResult, content: str) -> list[str]:
    comment = result.comment
    return [
        "✅ Comment updated successfully",
        "📋 Updated Comment Details:",
        f"   ID: {comment.id}",
        f"   Version: {comment.version.number} (was {result.previous_version})",
        f"   Updated: {format_date(comment.version.created_at, with_time=True)}",
        f"   Content Preview: {preview(content)}",
        f"💡 Usage: Current version is now {comment.version.number} - use this for future updates",
    ]


def format_deleted_comment(comment_id: str) -> list[str]:
    return [
        "✅ Comment deleted successfully",
        "📋 Deleted Comment Details:",
        f"   ID: {comment_id}",
        "   Status: Permanently removed",
        "💡 Note: Comment and all replies (if any) have been removed from the page",
    ]
