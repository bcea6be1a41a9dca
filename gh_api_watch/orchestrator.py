"""Run all enabled searches, verify recency, and aggregate Findings."""

import logging
from datetime import datetime, timedelta

from .aggregator import build_findings
from .client import GitHubClient
from .context import RunContext
from .enrichment import enrich_commit_dates, keep_verified
from .events import EventRecorder, EventSink, RunEventLog
from .models import Findings, QuerySpecification, RunOptions, utcnow
from .paginator import SearchPaginator
from .rate_governor import RateGovernor
from .settings import Settings

logger = logging.getLogger(__name__)

# Per-request estimate used for the run deadline (search pacing dominates)
PER_REQUEST_ESTIMATE = 12.0
BUDGET_MARGIN = 60.0
MIN_BUDGET = 4 * 60.0
MAX_BUDGET = 10 * 60.0


def new_run_id(now: datetime | None = None) -> str:
    return (now or utcnow()).strftime("%Y%m%dT%H%M%SZ")


def count_searches(spec: QuerySpecification, options: RunOptions) -> int:
    return sum(1 for _ in spec.enabled_searches(include_repo=options.include_repo_search))


def compute_budget(spec: QuerySpecification, options: RunOptions) -> float:
    """Seconds allowed for the whole run, scaled by the number of requests planned."""
    requests = count_searches(spec, options) * max(1, options.max_pages)
    budget = requests * PER_REQUEST_ESTIMATE + BUDGET_MARGIN
    return min(max(budget, MIN_BUDGET), MAX_BUDGET)


def run_searches(
    spec: QuerySpecification,
    options: RunOptions,
    ctx: RunContext,
    events: EventRecorder,
    client,
    governor: RateGovernor | None = None,
    now: datetime | None = None,
) -> Findings:
    """Search every enabled query, optionally verify code hits, and build Findings.

    Raises on transport failure, cancellation or a malformed response; a
    failed run never returns partial results.
    """
    now = now or utcnow()
    since = now - timedelta(days=options.days_back)
    governor = governor or RateGovernor(sleep=ctx.wait)
    paginator = SearchPaginator(client, governor, events, ctx, options, since)

    code_hits = []
    repo_hits = []
    notes = []
    for group, search in spec.enabled_searches(include_repo=options.include_repo_search):
        outcome = paginator.run(group, search)
        code_hits.extend(outcome.code_hits)
        repo_hits.extend(outcome.repo_hits)
        notes.extend(outcome.notes)
    # The last governor pause may have been cut short by a cancel or the deadline
    ctx.check()

    if options.use_commit_check and code_hits:
        events.emit("commit-check", note=f"files={len(code_hits)}")
        code_hits = enrich_commit_dates(
            client, governor, since, code_hits, workers=options.detail_workers, ctx=ctx
        )
        ctx.check()
        code_hits = keep_verified(code_hits, since)
        events.emit("commit-check-done", note=f"kept={len(code_hits)}")

    return build_findings(since, options.days_back, code_hits, repo_hits, notes, now=utcnow())


class Watcher:
    """Entry point for callers: one run per call, events kept in a shared log."""

    def __init__(self, settings: Settings, events: EventSink | None = None):
        self.settings = settings
        self.events = events if events is not None else RunEventLog(settings.event_log_limit)

    def run(
        self,
        spec: QuerySpecification,
        options: RunOptions | None = None,
        run_id: str | None = None,
        ctx: RunContext | None = None,
        client=None,
        governor: RateGovernor | None = None,
    ) -> Findings:
        options = options or self.settings.run_options()
        run_id = run_id or new_run_id()
        recorder = EventRecorder(self.events, run_id)
        budget = compute_budget(spec, options)
        ctx = ctx or RunContext(timeout=budget)
        recorder.emit(
            "start",
            note=(
                f"budget={budget:.0f}s daysBack={options.days_back} maxPages={options.max_pages} "
                f"perPage={options.per_page} includeRepo={options.include_repo_search} "
                f"commitCheck={options.use_commit_check}"
            ),
        )

        owns_client = client is None
        if owns_client:
            client = GitHubClient(token=self.settings.github_token)
        try:
            findings = run_searches(spec, options, ctx, recorder, client, governor=governor)
        except Exception as e:
            recorder.emit("error", note=f"search phase: {type(e).__name__}: {e}")
            raise
        finally:
            if owns_client:
                client.close()

        findings.run_id = run_id
        recorder.emit(
            "search-summary",
            note=(
                f"codeHits={len(findings.code_hits)} repoHits={len(findings.repo_hits)} "
                f"notes={len(findings.notes)}"
            ),
        )
        logger.info(
            "Run %s: %d code hits, %d repo hits, %d notes",
            run_id,
            len(findings.code_hits),
            len(findings.repo_hits),
            len(findings.notes),
        )
        return findings
