"""Structured per-run event log."""

import logging
import threading
from collections import deque
from typing import Protocol

from .models import RunEvent, format_timestamp, utcnow

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 1000


class EventSink(Protocol):
    def record(self, event: RunEvent) -> None: ...


class RunEventLog:
    """In-memory event sink keeping the newest `limit` events per run."""

    def __init__(self, limit: int = DEFAULT_LIMIT):
        self.limit = limit
        self._lock = threading.Lock()
        self._runs: dict[str, deque[RunEvent]] = {}
        self.last_run_id: str | None = None

    def record(self, event: RunEvent) -> None:
        with self._lock:
            events = self._runs.get(event.run_id)
            if events is None:
                events = self._runs[event.run_id] = deque(maxlen=self.limit)
            events.append(event)
            self.last_run_id = event.run_id
        logger.debug(
            "[%s] %s %s %s (page=%s status=%s rl=%s rs=%s) %s",
            event.run_id,
            event.ts,
            event.phase,
            event.query_name or "",
            event.page,
            event.status,
            event.rate_remaining,
            event.rate_reset,
            event.note or "",
        )

    def events(self, run_id: str | None = None) -> list[RunEvent]:
        """Copy of the events for run_id (default: the most recent run)."""
        run_id = run_id or self.last_run_id
        with self._lock:
            return list(self._runs.get(run_id, ()))

    def run_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._runs)


class EventRecorder:
    """Stamps events with the run id and time before handing them to a sink."""

    def __init__(self, sink: EventSink, run_id: str):
        self.sink = sink
        self.run_id = run_id

    def emit(self, phase: str, **fields) -> RunEvent:
        event = RunEvent(
            phase=phase,
            ts=format_timestamp(utcnow()),
            run_id=self.run_id,
            **fields,
        )
        self.sink.record(event)
        return event
