"""Thin httpx client for the GitHub REST search and commits endpoints."""

import httpx

from .models import CODE, REPO

API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0

# kind -> (endpoint, sort key)
_SEARCH_ENDPOINTS = {
    CODE: ("search/code", "indexed"),
    REPO: ("search/repositories", "updated"),
}


def search_url(kind: str, encoded_query: str, per_page: int, page: int) -> str:
    """Build a search URL around an already-encoded query string.

    The query is spliced in verbatim so the chosen encoding (lenient or strict)
    reaches GitHub unchanged.
    """
    endpoint, sort = _SEARCH_ENDPOINTS[kind]
    return (
        f"{API_BASE}/{endpoint}?q={encoded_query}"
        f"&sort={sort}&order=desc&per_page={per_page}&page={page}"
    )


def commits_url(repository: str) -> str:
    return f"{API_BASE}/repos/{repository}/commits"


class GitHubClient:
    """GitHub REST client. No retry, no throttle; callers own pacing."""

    def __init__(self, token: str | None = None, timeout: float = DEFAULT_TIMEOUT):
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(headers=headers, timeout=timeout)

    def get(
        self,
        url: str,
        params: dict | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        if timeout is None:
            return self._client.get(url, params=params)
        return self._client.get(url, params=params, timeout=timeout)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
