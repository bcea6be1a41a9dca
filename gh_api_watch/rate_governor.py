"""Pacing between GitHub requests, driven by rate limit response headers."""

import logging
import random
import threading
import time
from collections.abc import Callable, Mapping

import httpx

logger = logging.getLogger(__name__)

SEARCH_RESOURCE = "search"

# ~5 requests per minute for the search resource
SEARCH_BASE_WAIT = 12.0
DEFAULT_BASE_WAIT = 1.5
MAX_JITTER = 2.0

RETRY_MARGIN = 0.5
SEARCH_RESET_CAP = 120.0
DEFAULT_RESET_CAP = 300.0
SEARCH_FALLBACK_WAIT = 90.0
DEFAULT_FALLBACK_WAIT = 30.0

# Remaining quota at or below this counts as exhausted
LOW_REMAINING = 2


def _int_header(headers: httpx.Headers, name: str) -> int | None:
    val = headers.get(name)
    if val is None:
        return None
    try:
        return int(val.strip())
    except ValueError:
        return None


def _parse_retry_after(headers: httpx.Headers) -> float | None:
    val = headers.get("retry-after")
    if val is None:
        return None
    try:
        return float(val.strip())
    except ValueError:
        return None


def compute_wait(
    status: int,
    headers: Mapping[str, str],
    now: float | None = None,
    rng: random.Random | None = None,
) -> float:
    """Return how many seconds to pause after a response.

    Priority: explicit Retry-After, then quota exhaustion (sleep until reset,
    capped per resource), then steady pacing with jitter.
    """
    headers = httpx.Headers(headers)
    now = time.time() if now is None else now
    rng = rng or random
    resource = (headers.get("x-ratelimit-resource") or "").strip().lower()
    is_search = resource == SEARCH_RESOURCE

    retry_after = _parse_retry_after(headers)
    if retry_after is not None and retry_after > 0:
        return retry_after + RETRY_MARGIN

    remaining = _int_header(headers, "x-ratelimit-remaining")
    if status == 403 or (remaining is not None and remaining <= LOW_REMAINING):
        reset = _int_header(headers, "x-ratelimit-reset")
        if reset is not None and reset - now > 0:
            cap = SEARCH_RESET_CAP if is_search else DEFAULT_RESET_CAP
            return min(reset - now + RETRY_MARGIN, cap)
        return SEARCH_FALLBACK_WAIT if is_search else DEFAULT_FALLBACK_WAIT

    base = SEARCH_BASE_WAIT if is_search else DEFAULT_BASE_WAIT
    return base + rng.uniform(0, MAX_JITTER)


def describe_limit(response: httpx.Response, body_note: str, now: float | None = None) -> str:
    """Annotate a non-200 note with the planned sleep when the response looks rate limited."""
    headers = response.headers
    if response.status_code == 403 or headers.get("x-ratelimit-remaining") == "0":
        reset = _int_header(headers, "x-ratelimit-reset")
        if reset is not None:
            wait = int(reset - (time.time() if now is None else now))
            if wait > 0:
                return f"rate-limited; sleeping {wait}s; body={body_note}"
    return body_note


class RateGovernor:
    """Sleeps between requests according to each response's rate limit headers.

    The sleep function is injectable so a run context can cut waits short on
    cancellation, and tests can skip real sleeping.
    """

    def __init__(
        self,
        sleep: Callable[[float], object] = time.sleep,
        rng: random.Random | None = None,
    ):
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.total_wait = 0.0
        self._lock = threading.Lock()

    def pause(self, response: httpx.Response) -> float:
        wait = compute_wait(response.status_code, response.headers, rng=self._rng)
        if wait > SEARCH_BASE_WAIT + MAX_JITTER:
            logger.info(
                "Rate governor waiting %.1fs (status=%s remaining=%s resource=%s)",
                wait,
                response.status_code,
                response.headers.get("x-ratelimit-remaining"),
                response.headers.get("x-ratelimit-resource"),
            )
        with self._lock:
            self.total_wait += wait
        self._sleep(wait)
        return wait
