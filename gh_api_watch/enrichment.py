"""Verify code hit recency with a bounded pool of commit lookups."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime

import httpx

from .client import commits_url
from .context import RunContext
from .models import CodeHit, format_timestamp, parse_timestamp
from .rate_governor import RateGovernor

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 2
DETAIL_TIMEOUT = 10.0


def latest_commit_date(
    client,
    governor: RateGovernor,
    since: datetime,
    hit: CodeHit,
) -> datetime | None:
    """Date of the newest commit touching hit's file since `since`, or None.

    Any failure leaves the date unknown.
    """
    params = {"path": hit.file_path, "since": format_timestamp(since), "per_page": 1}
    try:
        resp = client.get(commits_url(hit.repository), params=params, timeout=DETAIL_TIMEOUT)
    except httpx.HTTPError as exc:
        logger.debug("commit lookup failed for %s/%s: %s", hit.repository, hit.file_path, exc)
        return None
    governor.pause(resp)
    if resp.status_code != 200:
        return None
    try:
        commits = resp.json()
    except ValueError:
        return None
    if not isinstance(commits, list) or not commits or not isinstance(commits[0], dict):
        return None
    commit = commits[0].get("commit")
    author = commit.get("author") if isinstance(commit, dict) else None
    if not isinstance(author, dict):
        return None
    return parse_timestamp(author.get("date"))


def enrich_commit_dates(
    client,
    governor: RateGovernor,
    since: datetime,
    hits: list[CodeHit],
    workers: int = DEFAULT_WORKERS,
    ctx: RunContext | None = None,
) -> list[CodeHit]:
    """Return copies of hits with commit_date filled in where a lookup succeeded.

    Output position i always corresponds to input position i, whatever order
    the workers finish in.
    """
    out: list[CodeHit] = list(hits)
    if not hits:
        return out

    def process_one(index: int, hit: CodeHit) -> tuple[int, datetime | None]:
        if ctx is not None and ctx.done:
            return index, None
        return index, latest_commit_date(client, governor, since, hit)

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = [executor.submit(process_one, i, hit) for i, hit in enumerate(hits)]
        for future in as_completed(futures):
            index, date = future.result()
            out[index] = replace(hits[index], commit_date=date)
    return out


def keep_verified(hits: list[CodeHit], since: datetime) -> list[CodeHit]:
    """Drop hits whose commit date is unknown or older than the window start."""
    return [h for h in hits if h.commit_date is not None and h.commit_date >= since]
