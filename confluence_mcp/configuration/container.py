from dataclasses import dataclass

import httpx

from confluence_mcp.adapters.outbound.confluence_adapter import ConfluenceAdapter
from confluence_mcp.application.services.content_converter import ContentConverter
from confluence_mcp.application.services.search_resolver import SearchResolver
from confluence_mcp.application.use_cases.add_comment import AddCommentUseCase
from confluence_mcp.application.use_cases.create_page import CreatePageUseCase
from confluence_mcp.application.use_cases.delete_comment import DeleteCommentUseCase
from confluence_mcp.application.use_cases.delete_page import DeletePageUseCase
from confluence_mcp.application.use_cases.get_page_comments import GetPageCommentsUseCase
from confluence_mcp.application.use_cases.get_page_content import GetPageContentUseCase
from confluence_mcp.application.use_cases.get_page_versions import GetPageVersionsUseCase
from confluence_mcp.application.use_cases.get_spaces import GetSpacesUseCase
from confluence_mcp.application.use_cases.search_pages import SearchPagesUseCase
from confluence_mcp.application.use_cases.update_comment import UpdateCommentUseCase
from confluence_mcp.application.use_cases.update_page import UpdatePageUseCase
from confluence_mcp.configuration.settings import Settings


@dataclass(frozen=True)
class Container:
    settings: Settings
    confluence_adapter: ConfluenceAdapter
    create_page_use_case: CreatePageUseCase
    get_page_content_use_case: GetPageContentUseCase
    update_page_use_case: UpdatePageUseCase
    delete_page_use_case: DeletePageUseCase
    get_spaces_use_case: GetSpacesUseCase
    search_pages_use_case: SearchPagesUseCase
    get_page_versions_use_case: GetPageVersionsUseCase
    get_page_comments_use_case: GetPageCommentsUseCase
    add_comment_use_case: AddCommentUseCase
    update_comment_use_case: UpdateCommentUseCase
    delete_comment_use_case: DeleteCommentUseCase


def build_container(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Container:
    """Wire the adapter, services and use cases for one server process.

    Nothing here is cached at module level; the caller owns the container and
    passes it to the tool registry.
    """
    confluence_adapter = ConfluenceAdapter(
        site_name=settings.site_name,
        api_token=settings.api_token,
        email=settings.email,
        timeout=settings.request_timeout,
        transport=transport,
    )
    content_converter = ContentConverter()
    search_resolver = SearchResolver(
        confluence_port=confluence_adapter,
        base_url=confluence_adapter.wiki_base_url,
    )

    return Container(
        settings=settings,
        confluence_adapter=confluence_adapter,
        create_page_use_case=CreatePageUseCase(confluence_adapter, content_converter),
        get_page_content_use_case=GetPageContentUseCase(confluence_adapter),
        update_page_use_case=UpdatePageUseCase(confluence_adapter, content_converter),
        delete_page_use_case=DeletePageUseCase(confluence_adapter),
        get_spaces_use_case=GetSpacesUseCase(confluence_adapter),
        search_pages_use_case=SearchPagesUseCase(search_resolver),
        get_page_versions_use_case=GetPageVersionsUseCase(confluence_adapter),
        get_page_comments_use_case=GetPageCommentsUseCase(confluence_adapter),
        add_comment_use_case=AddCommentUseCase(confluence_adapter, content_converter),
        update_comment_use_case=UpdateCommentUseCase(confluence_adapter, content_converter),
        delete_comment_use_case=DeleteCommentUseCase(confluence_adapter),
    )
