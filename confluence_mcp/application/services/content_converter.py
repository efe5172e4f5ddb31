import logging

import mistune

from confluence_mcp.domain.confluence import ContentFormat

logger = logging.getLogger(__name__)


class _ConfluenceRenderer(mistune.HTMLRenderer):
    """Markdown renderer producing Confluence storage format.

    Fenced code becomes the ``code`` structured macro so Confluence keeps the
    language and renders it with its own highlighter.
    """

    def block_code(self, code: str, info=None, **attrs) -> str:
        language = info.strip().split()[0] if info and info.strip() else "text"
        safe_code = code.replace("]]>", "]]]]><![CDATA[>")
        return (
            f'<ac:structured-macro ac:name="code">\n'
            f'  <ac:parameter ac:name="language">{language}</ac:parameter>\n'
            f'  <ac:plain-text-body><![CDATA[{safe_code}]]></ac:plain-text-body>\n'
            f'</ac:structured-macro>\n'
        )


class ContentConverter:
    """Turns caller-supplied body text into Confluence storage format."""

    def __init__(self):
        self._md = mistune.create_markdown(
            renderer=_ConfluenceRenderer(escape=True),
            plugins=["table", "strikethrough"],
        )

    def to_storage(self, content: str, content_format: ContentFormat = ContentFormat.STORAGE) -> str:
        if content_format is ContentFormat.STORAGE:
            return content

        stripped = content.strip()
        # already markup: pass through untouched
        if stripped.startswith("<") and not stripped.startswith("< "):
            return stripped

        converted = self._md(stripped).strip()
        logger.info("Markdown converted to storage format: %d -> %d chars", len(content), len(converted))
        return converted
