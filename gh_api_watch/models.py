"""Data models and constants for GitHub search watching."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

CODE = "code"
REPO = "repo"
SEARCH_KINDS = (CODE, REPO)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a GitHub RFC 3339 timestamp into an aware UTC datetime.

    Returns None for empty, non-string or unparseable values.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class SearchDefinition:
    """One named GitHub search inside a group."""

    name: str
    kind: str
    query: str
    enabled: bool = True


@dataclass(frozen=True)
class Group:
    name: str
    enabled: bool = True
    searches: tuple[SearchDefinition, ...] = ()


@dataclass(frozen=True)
class QuerySpecification:
    """Ordered groups of searches supplied by the caller."""

    groups: tuple[Group, ...] = ()

    def enabled_searches(self, include_repo: bool = True):
        """Yield (group, search) for every enabled search in enabled groups, in order."""
        for group in self.groups:
            if not group.enabled:
                continue
            for search in group.searches:
                if not search.enabled:
                    continue
                if search.kind.lower() == REPO and not include_repo:
                    continue
                yield group, search


@dataclass
class RunOptions:
    """Run-wide tuning values."""

    days_back: int = 7
    max_pages: int = 2
    per_page: int = 50
    use_commit_check: bool = True
    include_repo_search: bool = True
    detail_workers: int = 2


@dataclass
class CodeHit:
    group: str
    query_name: str
    repository: str
    repo_url: str
    file_path: str
    file_url: str
    language: str = ""
    commit_date: datetime | None = None  # set by the commit check

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.repository, self.file_path, self.file_url)


@dataclass
class RepoHit:
    group: str
    query_name: str
    full_name: str
    html_url: str
    description: str
    pushed_at: datetime
    created_at: datetime | None = None

    @property
    def key(self) -> str:
        return self.full_name


@dataclass
class Findings:
    """Result of one run, handed to the caller for summarization."""

    since_iso: str
    days_back: int
    generated: str
    code_hits: list[CodeHit] = field(default_factory=list)
    repo_hits: list[RepoHit] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    run_id: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        for hit in data["code_hits"]:
            hit["commit_date"] = format_timestamp(hit["commit_date"])
        for hit in data["repo_hits"]:
            hit["pushed_at"] = format_timestamp(hit["pushed_at"])
            hit["created_at"] = format_timestamp(hit["created_at"])
        return data


@dataclass
class RunEvent:
    """Structured per-request/per-phase log entry."""

    phase: str
    ts: str = ""
    run_id: str = ""
    group: str | None = None
    query_name: str | None = None
    url: str | None = None
    page: int | None = None
    status: int | None = None
    rate_remaining: str | None = None
    rate_reset: str | None = None
    note: str | None = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v not in (None, "")}
