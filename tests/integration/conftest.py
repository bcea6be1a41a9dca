"""Integration fixtures: a fake GitHub behind the client interface.

Everything above the HTTP boundary is real; responses are real httpx.Response
objects routed by URL.
"""

import threading

import httpx
import pytest

SEARCH_HEADERS = {
    "X-RateLimit-Resource": "search",
    "X-RateLimit-Remaining": "25",
    "X-RateLimit-Reset": "1700000000",
}
CORE_HEADERS = {
    "X-RateLimit-Resource": "core",
    "X-RateLimit-Remaining": "4000",
    "X-RateLimit-Reset": "1700000000",
}


def code_item(repo: str, path: str) -> dict:
    return {
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "html_url": f"https://github.com/{repo}/blob/main/{path}",
        "repository": {"full_name": repo, "html_url": f"https://github.com/{repo}", "language": "Python"},
    }


def repo_item(name: str, pushed: str) -> dict:
    return {
        "full_name": name,
        "html_url": f"https://github.com/{name}",
        "description": f"{name} description",
        "pushed_at": pushed,
        "created_at": "2021-01-01T00:00:00Z",
    }


def search_response(items, status=200) -> httpx.Response:
    if status != 200:
        return httpx.Response(status, json={"message": "Validation Failed"}, headers=SEARCH_HEADERS)
    return httpx.Response(status, json={"total_count": len(items), "items": items}, headers=SEARCH_HEADERS)


class FakeGitHub:
    """Routes search and commits URLs to test-provided data.

    search: callable(kind, q, page, url) -> httpx.Response, where q is the decoded query
    commits: {(repo, path): iso date or None}; missing or None answers 404
    """

    def __init__(self, search, commits=None):
        self.search = search
        self.commits = commits or {}
        self.calls: list[str] = []
        self._lock = threading.Lock()
        self.closed = False

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.calls.append(url)
        parsed = httpx.URL(url)
        if parsed.path.startswith("/search/"):
            kind = "code" if parsed.path == "/search/code" else "repo"
            return self.search(kind, parsed.params.get("q"), int(parsed.params["page"]), url)
        repo = parsed.path.removeprefix("/repos/").removesuffix("/commits")
        date = self.commits.get((repo, params["path"]))
        if date is None:
            return httpx.Response(404, json={"message": "Not Found"}, headers=CORE_HEADERS)
        return httpx.Response(
            200, json=[{"sha": "abc", "commit": {"author": {"date": date}}}], headers=CORE_HEADERS
        )

    def search_calls(self) -> list[str]:
        return [u for u in self.calls if "/search/" in u]

    def close(self):
        self.closed = True


@pytest.fixture
def make_github():
    return FakeGitHub
