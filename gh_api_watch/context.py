"""Run deadline and cancellation."""

import threading
import time


class RunCancelled(Exception):
    """The run was cancelled before it finished."""


class RunTimedOut(RunCancelled):
    """The run exceeded its deadline."""


class RunContext:
    """Deadline plus explicit cancellation, shared by every phase of a run.

    Pagination calls check() before each request; waits go through wait() so
    a cancel wakes sleeping threads immediately.
    """

    def __init__(self, timeout: float | None = None):
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def error(self) -> RunCancelled | None:
        """The exception check() would raise, or None while the run is live."""
        if self.cancelled:
            return RunCancelled("run cancelled")
        if self.expired:
            return RunTimedOut("run deadline exceeded")
        return None

    def check(self) -> None:
        err = self.error()
        if err is not None:
            raise err

    def wait(self, seconds: float) -> bool:
        """Sleep up to seconds, returning early if the run is cancelled or times out.

        Returns True if the full wait elapsed.
        """
        remaining = self.remaining()
        timeout = seconds if remaining is None else min(seconds, remaining)
        if timeout > 0:
            self._cancelled.wait(timeout)
        return not self.done and timeout >= seconds

    def request_timeout(self, default: float) -> float:
        """Per-request timeout bounded by the remaining run budget."""
        remaining = self.remaining()
        if remaining is None:
            return default
        return max(0.001, min(default, remaining))
