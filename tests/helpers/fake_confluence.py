"""In-memory Confluence Cloud stand-in served through httpx.MockTransport.

Covers the v2 page, space, version and footer-comment endpoints and the v1
search and content endpoints the adapter calls. Versions are enforced the way
Confluence does it: an update must carry exactly current + 1.
"""

import json
import re
from dataclasses import dataclass, field

import httpx

SITE = "example.atlassian.net"
WIKI = f"https://{SITE}/wiki"

_CQL_TEXT = re.compile(r'(?:title|text) ~ "([^"*]*)\*?"')
_CQL_SPACE = re.compile(r'space = "([^"]+)"')


@dataclass
class FakePage:
    id: str
    space_id: str
    title: str
    body: str
    parent_id: str | None = None
    versions: list[dict] = field(default_factory=list)

    @property
    def version(self) -> int:
        return self.versions[-1]["number"]


@dataclass
class FakeComment:
    id: str
    page_id: str
    body: str
    version: int = 1
    parent_comment_id: str | None = None


class FakeConfluence:
    """Stateful fake. ``fail`` maps a path prefix to a forced status code."""

    def __init__(self, comment_page_size: int | None = None):
        self.spaces = {
            "100": {"id": "100", "key": "DOCS", "name": "Documentation", "type": "global",
                    "status": "current", "homepageId": "1"},
            "200": {"id": "200", "key": "ENG", "name": "Engineering", "type": "global",
                    "status": "current", "homepageId": None},
        }
        self.pages: dict[str, FakePage] = {}
        self.comments: dict[str, FakeComment] = {}
        self.fail: dict[str, int] = {}
        self.requests: list[httpx.Request] = []
        self.comment_page_size = comment_page_size
        self._next_id = 1000

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, path_prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(path_prefix)]

    def add_page(self, title: str, body: str = "<p>body</p>", space_id: str = "100") -> FakePage:
        page = FakePage(id=self._new_id(), space_id=space_id, title=title, body=body)
        page.versions.append(self._version_entry(1, ""))
        self.pages[page.id] = page
        return page

    def add_comment(self, page_id: str, body: str = "<p>comment</p>") -> FakeComment:
        comment = FakeComment(id=self._new_id(), page_id=page_id, body=body)
        self.comments[comment.id] = comment
        return comment

    # ------------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for prefix, status in self.fail.items():
            if path.startswith(prefix):
                return _error(status, f"Forced failure for {prefix}")

        v2 = "/wiki/api/v2"
        v1 = "/wiki/rest/api"
        method = request.method

        if path == f"{v2}/pages" and method == "POST":
            return self._create_page(_body(request))
        if m := re.fullmatch(rf"{v2}/pages/(\w+)/versions", path):
            return self._page_versions(m.group(1), request)
        if m := re.fullmatch(rf"{v2}/pages/(\w+)/footer-comments", path):
            return self._page_comments(m.group(1), request)
        if m := re.fullmatch(rf"{v2}/pages/(\w+)", path):
            page_id = m.group(1)
            if method == "GET":
                return self._get_page(page_id, request)
            if method == "PUT":
                return self._update_page(page_id, _body(request))
            if method == "DELETE":
                return self._delete(self.pages, page_id, "Page")
        if path == f"{v2}/spaces":
            limit = int(request.url.params.get("limit", 25))
            return _ok({"results": list(self.spaces.values())[:limit], "_links": {"base": WIKI}})
        if m := re.fullmatch(rf"{v2}/spaces/(\w+)", path):
            space = self.spaces.get(m.group(1))
            return _ok(space) if space else _error(404, "Space not found")
        if path == f"{v2}/footer-comments" and method == "POST":
            return self._create_comment(_body(request))
        if m := re.fullmatch(rf"{v2}/footer-comments/(\w+)", path):
            comment_id = m.group(1)
            if method == "PUT":
                return self._update_comment(comment_id, _body(request))
            if method == "DELETE":
                return self._delete(self.comments, comment_id, "Comment")
        if path == f"{v1}/search":
            return self._search(request)
        if path == f"{v1}/content":
            return self._list_content(request)

        return _error(404, f"No route for {method} {path}")

    # ------------------------------------------------------------------

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    @staticmethod
    def _version_entry(number: int, message: str) -> dict:
        return {
            "number": number,
            "message": message,
            "authorId": "user-1",
            "createdAt": f"2024-01-{number:02d}T10:00:00.000Z",
            "minorEdit": False,
        }

    def _page_json(self, page: FakePage, version: dict | None = None, body: str | None = None) -> dict:
        version = version or page.versions[-1]
        return {
            "id": page.id,
            "status": "current",
            "title": page.title,
            "spaceId": page.space_id,
            "parentId": page.parent_id,
            "authorId": "user-1",
            "createdAt": page.versions[0]["createdAt"],
            "version": version,
            "body": {"storage": {"representation": "storage", "value": page.body if body is None else body}},
            "_links": {"webui": f"/spaces/DOCS/pages/{page.id}", "base": WIKI},
        }

    def _create_page(self, payload: dict) -> httpx.Response:
        if payload.get("spaceId") not in self.spaces:
            return _error(404, "Space not found")
        page = self.add_page(payload["title"], payload["body"]["value"], payload["spaceId"])
        page.parent_id = payload.get("parentId")
        return _ok(self._page_json(page))

    def _get_page(self, page_id: str, request: httpx.Request) -> httpx.Response:
        page = self.pages.get(page_id)
        if page is None:
            return _error(404, "Page not found")
        requested = request.url.params.get("version")
        if requested:
            for entry in page.versions:
                if entry["number"] == int(requested):
                    return _ok(self._page_json(page, entry, entry.get("body", page.body)))
            return _error(404, "Version not found")
        return _ok(self._page_json(page))

    def _update_page(self, page_id: str, payload: dict) -> httpx.Response:
        page = self.pages.get(page_id)
        if page is None:
            return _error(404, "Page not found")
        number = payload["version"]["number"]
        if number != page.version + 1:
            return _error(409, f"Version must be incremented when updating a page. Current version is: {page.version}")
        page.versions[-1]["body"] = page.body
        page.title = payload["title"]
        page.body = payload["body"]["value"]
        page.versions.append(self._version_entry(number, payload["version"].get("message", "")))
        return _ok(self._page_json(page))

    def _page_versions(self, page_id: str, request: httpx.Request) -> httpx.Response:
        page = self.pages.get(page_id)
        if page is None:
            return _error(404, "Page not found")
        limit = int(request.url.params.get("limit", 10))
        entries = [{k: v for k, v in e.items() if k != "body"} for e in reversed(page.versions)]
        return _ok({"results": entries[:limit]})

    def _page_comments(self, page_id: str, request: httpx.Request) -> httpx.Response:
        if page_id not in self.pages:
            return _error(404, "Page not found")
        comments = [c for c in self.comments.values() if c.page_id == page_id]
        limit = int(request.url.params.get("limit", 25))
        size = min(limit, self.comment_page_size or limit)
        start = int(request.url.params.get("cursor", 0))
        batch = comments[start:start + size]
        links = {}
        if start + size < len(comments):
            links["next"] = f"/wiki/api/v2/pages/{page_id}/footer-comments?cursor={start + size}&limit={limit}"
        return _ok({"results": [self._comment_json(c) for c in batch], "_links": links})

    def _comment_json(self, comment: FakeComment) -> dict:
        return {
            "id": comment.id,
            "pageId": comment.page_id,
            "status": "current",
            "title": f"Re: page {comment.page_id}",
            "parentCommentId": comment.parent_comment_id,
            "version": self._version_entry(comment.version, ""),
            "body": {"storage": {"representation": "storage", "value": comment.body}},
            "_links": {"webui": f"/pages/{comment.page_id}?focusedCommentId={comment.id}"},
        }

    def _create_comment(self, payload: dict) -> httpx.Response:
        parent_id = payload.get("parentCommentId")
        if parent_id:
            parent = self.comments.get(parent_id)
            if parent is None:
                return _error(404, "Parent comment not found")
            page_id = parent.page_id
        else:
            page_id = payload.get("pageId")
            if page_id not in self.pages:
                return _error(404, "Page not found")
        comment = self.add_comment(page_id, payload["body"]["value"])
        comment.parent_comment_id = parent_id
        return _ok(self._comment_json(comment))

    def _update_comment(self, comment_id: str, payload: dict) -> httpx.Response:
        comment = self.comments.get(comment_id)
        if comment is None:
            return _error(404, "Comment not found")
        number = payload["version"]["number"]
        if number != comment.version + 1:
            return _error(409, f"Version conflict: expected {comment.version + 1}")
        comment.version = number
        comment.body = payload["body"]["value"]
        return _ok(self._comment_json(comment))

    @staticmethod
    def _delete(store: dict, key: str, label: str) -> httpx.Response:
        if store.pop(key, None) is None:
            return _error(404, f"{label} not found")
        return httpx.Response(204)

    def _v1_content(self, page: FakePage) -> dict:
        space = self.spaces[page.space_id]
        return {
            "id": page.id,
            "type": "page",
            "title": page.title,
            "space": {"key": space["key"], "name": space["name"]},
            "version": {"number": page.version, "when": page.versions[-1]["createdAt"],
                        "by": {"displayName": "Test User"}},
            "history": {"createdBy": {"displayName": "Test User"}},
            "_links": {"webui": f"/spaces/{space['key']}/pages/{page.id}"},
        }

    def _pages_in(self, space_key: str | None) -> list[FakePage]:
        pages = list(self.pages.values())
        if space_key:
            ids = {s["id"] for s in self.spaces.values() if s["key"] == space_key}
            pages = [p for p in pages if p.space_id in ids]
        return pages

    def _search(self, request: httpx.Request) -> httpx.Response:
        cql = request.url.params.get("cql", "")
        limit = int(request.url.params.get("limit", 25))
        space = _CQL_SPACE.search(cql)
        text = _CQL_TEXT.search(cql)
        needle = text.group(1).lower() if text else ""
        hits = [
            p for p in self._pages_in(space.group(1) if space else None)
            if needle in p.title.lower() or needle in p.body.lower()
        ]
        results = [
            {"content": self._v1_content(p), "title": p.title, "url": f"/spaces/DOCS/pages/{p.id}",
             "lastModified": p.versions[-1]["createdAt"], "entityType": "content"}
            for p in hits[:limit]
        ]
        return _ok({"results": results, "totalSize": len(hits), "size": len(results), "_links": {"base": WIKI}})

    def _list_content(self, request: httpx.Request) -> httpx.Response:
        space_key = request.url.params.get("spaceKey")
        title = request.url.params.get("title")
        limit = int(request.url.params.get("limit", 25))
        pages = [p for p in self._pages_in(space_key) if not title or p.title == title]
        results = [self._v1_content(p) for p in pages[:limit]]
        return _ok({"results": results, "size": len(results), "_links": {"base": WIKI}})


def _body(request: httpx.Request) -> dict:
    return json.loads(request.content or b"{}")


def _ok(data: dict) -> httpx.Response:
    return httpx.Response(200, json=data)


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"errors": [{"status": status, "title": message}]})
