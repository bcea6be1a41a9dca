"""Merge, dedupe and order hits into Findings."""

from datetime import datetime, timezone

from .models import CodeHit, Findings, RepoHit, format_timestamp, utcnow

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def dedupe_code_hits(hits: list[CodeHit]) -> list[CodeHit]:
    """First occurrence per (repository, path, url) wins."""
    seen = set()
    out = []
    for hit in hits:
        if hit.key not in seen:
            seen.add(hit.key)
            out.append(hit)
    return out


def dedupe_repo_hits(hits: list[RepoHit]) -> list[RepoHit]:
    seen = set()
    out = []
    for hit in hits:
        if hit.key not in seen:
            seen.add(hit.key)
            out.append(hit)
    return out


def sort_code_hits(hits: list[CodeHit]) -> list[CodeHit]:
    """Newest commit first; undated hits last, keeping their relative order."""
    return sorted(
        hits,
        key=lambda h: (h.commit_date is not None, h.commit_date or _OLDEST),
        reverse=True,
    )


def sort_repo_hits(hits: list[RepoHit]) -> list[RepoHit]:
    return sorted(hits, key=lambda h: h.pushed_at, reverse=True)


def build_findings(
    since: datetime,
    days_back: int,
    code_hits: list[CodeHit],
    repo_hits: list[RepoHit],
    notes: list[str],
    now: datetime | None = None,
) -> Findings:
    return Findings(
        since_iso=format_timestamp(since),
        days_back=days_back,
        generated=format_timestamp(now or utcnow()),
        code_hits=sort_code_hits(dedupe_code_hits(code_hits)),
        repo_hits=sort_repo_hits(dedupe_repo_hits(repo_hits)),
        notes=list(notes),
    )
