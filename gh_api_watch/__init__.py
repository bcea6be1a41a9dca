"""Watch GitHub search for recent code and repositories.

Polls code and repository search across named query groups under GitHub's
rate limits, optionally verifies code hits against the commits API, and
returns deduplicated, recency-ordered Findings.
"""

from .cli import main
from .context import RunCancelled, RunContext, RunTimedOut
from .events import EventSink, RunEventLog
from .models import CodeHit, Findings, QuerySpecification, RepoHit, RunEvent, RunOptions
from .orchestrator import Watcher, run_searches
from .queries import load_queries, parse_queries

__all__ = [
    "main",
    "CodeHit",
    "EventSink",
    "Findings",
    "QuerySpecification",
    "RepoHit",
    "RunCancelled",
    "RunContext",
    "RunEvent",
    "RunEventLog",
    "RunOptions",
    "RunTimedOut",
    "Watcher",
    "load_queries",
    "parse_queries",
    "run_searches",
]

if __name__ == "__main__":
    main()
