"""Unit tests for tool result rendering."""

from confluence_mcp.adapters.inbound.mcp import formatters
from confluence_mcp.domain.confluence import (
    CommentPage,
    SearchMethod,
    SearchOutcome,
    SearchQuery,
    SearchResult,
    StrategyFailure,
)
from confluence_mcp.domain.errors import PermissionDeniedError


class TestFormatDate:

    def test_iso_timestamp(self):
        assert formatters.format_date("2024-03-01T12:30:00.000Z") == "2024-03-01"
        assert formatters.format_date("2024-03-01T12:30:00.000Z", with_time=True) == "2024-03-01 12:30"

    def test_unparsable_value_is_returned_as_is(self):
        assert formatters.format_date("yesterday") == "yesterday"

    def test_empty(self):
        assert formatters.format_date("") == "Unknown"


class TestFormatSearch:

    def test_result_line_shape(self):
        outcome = SearchOutcome(
            results=[SearchResult(id="7", title="Guide", space_key="DOCS", last_modified="2024-03-01T00:00:00Z")],
            total_size=1,
            method=SearchMethod.CQL,
        )

        segments = formatters.format_search(outcome, SearchQuery(query="guide"))

        assert '  1. "Guide" (ID: 7) [DOCS] - Modified: 2024-03-01' in segments
        assert "🔧 Search method: CQL" in segments

    def test_empty_result_shows_criteria_and_absorbed_failures(self):
        failure = StrategyFailure(SearchMethod.CQL, PermissionDeniedError("Access denied: no", 403))
        outcome = SearchOutcome(results=[], total_size=0, method=SearchMethod.CONTENT_API, failures=[failure])

        text = "\n".join(formatters.format_search(outcome, SearchQuery(space_key="DOCS")))

        assert "No pages found" in text
        assert "spaceKey='DOCS'" in text
        assert "🔧 Search method: Content API" in text
        assert "⚠️ Fallback after: CQL: PermissionDenied - Access denied: no" in text


class TestFormatComments:

    def test_no_comments(self):
        segments = formatters.format_comments("42", CommentPage(comments=[]), 25)

        assert segments[0] == "💬 No comments found on page 42"

    def test_preview_strips_markup_and_truncates(self):
        assert formatters.preview("<p>" + "x" * 150 + "</p>") == "x" * 100 + "..."
        assert formatters.preview("<p></p>") == "[No content]"
