"""Walk GitHub search result pages for one search definition."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

import httpx

from .client import DEFAULT_TIMEOUT, search_url
from .context import RunContext
from .events import EventRecorder
from .models import (
    CODE,
    REPO,
    SEARCH_KINDS,
    CodeHit,
    Group,
    RepoHit,
    RunOptions,
    SearchDefinition,
    parse_timestamp,
)
from .rate_governor import RateGovernor, describe_limit
from .sanitize import encode_query, encode_query_strict, sanitize_query, with_pushed_since

logger = logging.getLogger(__name__)

UNPROCESSABLE = 422
NOTE_BODY_LIMIT = 400
EVENT_BODY_LIMIT = 200


class ResponseFormatError(ValueError):
    """GitHub returned a body that doesn't match the search API contract."""


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


@dataclass
class SearchOutcome:
    code_hits: list[CodeHit] = field(default_factory=list)
    repo_hits: list[RepoHit] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class SearchPaginator:
    """Runs one search at a time, page by page, under the rate governor.

    Transport errors, cancellation and malformed bodies propagate. Non-200
    statuses are recorded as notes and abandon only the current search.
    """

    def __init__(
        self,
        client,
        governor: RateGovernor,
        events: EventRecorder,
        ctx: RunContext,
        options: RunOptions,
        since: datetime,
    ):
        self.client = client
        self.governor = governor
        self.events = events
        self.ctx = ctx
        self.options = options
        self.since = since

    def run(self, group: Group, search: SearchDefinition) -> SearchOutcome:
        outcome = SearchOutcome()
        kind = search.kind.lower()
        label = f"{group.name} / {search.name}"
        where = {"group": group.name, "query_name": search.name}

        if kind not in SEARCH_KINDS:
            outcome.notes.append(f"Unknown type for {label}: {search.kind}")
            self.events.emit("search-unknown", note=f"unknown search type: {search.kind}", **where)
            return outcome

        query = search.query
        if kind == REPO:
            query = with_pushed_since(query, self.since)
        query = sanitize_query(query, kind)

        encode = encode_query
        found = 0
        page = 1
        while page <= self.options.max_pages:
            url = search_url(kind, encode(query), self.options.per_page, page)
            self.events.emit(f"search-{kind}", url=url, page=page, **where)
            resp = self._get(kind, url, page, where)

            if resp.status_code == UNPROCESSABLE and encode is encode_query:
                first, first_url = resp, url
                self._emit_non200(kind, first, first_url, page, where)
                encode = encode_query_strict
                url = search_url(kind, encode(query), self.options.per_page, page)
                self.events.emit(
                    f"search-{kind}-retry",
                    url=url,
                    page=page,
                    note="retry with strict encoding due to 422",
                    **where,
                )
                resp = self._get(kind, url, page, where)
                if resp.status_code != 200:
                    outcome.notes.append(f"({label}) retry strict {self._status_note(resp, url)}")
                    self.events.emit(
                        f"search-{kind}-retry-failed",
                        url=url,
                        page=page,
                        status=resp.status_code,
                        note=truncate(resp.text, EVENT_BODY_LIMIT),
                        **self._rate_fields(resp),
                        **where,
                    )
                    outcome.notes.append(f"({label}) {self._status_note(first, first_url)}")
                    self.governor.pause(resp)
                    break
            elif resp.status_code != 200:
                self._emit_non200(kind, resp, url, page, where)
                outcome.notes.append(f"({label}) {self._status_note(resp, url)}")
                self.governor.pause(resp)
                break

            items = self._items(resp, url)
            if not items:
                self.events.emit(f"search-{kind}-ok", url=url, page=page, status=200, note="0 items", **where)
                self.governor.pause(resp)
                break

            if kind == CODE:
                hits = [self._code_hit(group, search, item) for item in items]
                outcome.code_hits.extend(hits)
            else:
                hits = [hit for hit in (self._repo_hit(group, search, item) for item in items) if hit]
                outcome.repo_hits.extend(hits)
            found += len(hits)

            self.events.emit(
                f"search-{kind}-ok", url=url, page=page, status=200, note=f"items={len(items)}", **where
            )
            page += 1
            self.governor.pause(resp)

        if found == 0:
            if kind == CODE:
                outcome.notes.append(f"No code hits returned for {label}")
            else:
                outcome.notes.append(f"No repo hits for {label}")
            self.events.emit(f"search-{kind}-empty", note=f"no {kind} hits", **where)
        logger.debug("%s: %d %s hits", label, found, kind)
        return outcome

    def _get(self, kind: str, url: str, page: int, where: dict) -> httpx.Response:
        self.ctx.check()
        try:
            return self.client.get(url, timeout=self.ctx.request_timeout(DEFAULT_TIMEOUT))
        except httpx.TransportError as exc:
            self.events.emit(
                f"search-{kind}-error", url=url, page=page, note=str(exc) or type(exc).__name__, **where
            )
            err = self.ctx.error()
            if err is not None:
                raise err from exc
            raise

    def _emit_non200(self, kind: str, resp: httpx.Response, url: str, page: int, where: dict):
        logger.warning("%s search returned %s for %s", kind, resp.status_code, url)
        self.events.emit(
            f"search-{kind}-non200",
            url=url,
            page=page,
            status=resp.status_code,
            note=describe_limit(resp, truncate(resp.text, EVENT_BODY_LIMIT)),
            **self._rate_fields(resp),
            **where,
        )

    @staticmethod
    def _rate_fields(resp: httpx.Response) -> dict:
        return {
            "rate_remaining": resp.headers.get("x-ratelimit-remaining"),
            "rate_reset": resp.headers.get("x-ratelimit-reset"),
        }

    @staticmethod
    def _status_note(resp: httpx.Response, url: str) -> str:
        return (
            f"status={resp.status_code} "
            f"remaining={resp.headers.get('x-ratelimit-remaining', '')} "
            f"reset={resp.headers.get('x-ratelimit-reset', '')} "
            f"url={url} body={truncate(resp.text, NOTE_BODY_LIMIT)}"
        )

    @staticmethod
    def _items(resp: httpx.Response, url: str) -> list[dict]:
        try:
            body = resp.json()
        except ValueError as exc:
            raise ResponseFormatError(f"invalid JSON from {url}") from exc
        if not isinstance(body, dict):
            raise ResponseFormatError(f"expected an object from {url}, got {type(body).__name__}")
        items = body.get("items") or []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise ResponseFormatError(f"malformed items list from {url}")
        return items

    @staticmethod
    def _code_hit(group: Group, search: SearchDefinition, item: dict) -> CodeHit:
        repo = item.get("repository") or {}
        return CodeHit(
            group=group.name,
            query_name=search.name,
            repository=repo.get("full_name", ""),
            repo_url=repo.get("html_url", ""),
            file_path=item.get("path", ""),
            file_url=item.get("html_url", ""),
            language=repo.get("language") or "",
        )

    def _repo_hit(self, group: Group, search: SearchDefinition, item: dict) -> RepoHit | None:
        # GitHub's pushed: qualifier is advisory; enforce the window locally
        pushed = parse_timestamp(item.get("pushed_at"))
        if pushed is None or pushed < self.since:
            return None
        return RepoHit(
            group=group.name,
            query_name=search.name,
            full_name=item.get("full_name", ""),
            html_url=item.get("html_url", ""),
            description=item.get("description") or "",
            pushed_at=pushed,
            created_at=parse_timestamp(item.get("created_at")),
        )
