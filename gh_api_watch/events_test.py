"""Unit tests for the run event log."""

import threading

from .events import EventRecorder, RunEventLog
from .models import RunEvent


def describe_RunEventLog():
    def it_keeps_events_per_run():
        log = RunEventLog()
        log.record(RunEvent(phase="start", run_id="a"))
        log.record(RunEvent(phase="start", run_id="b"))
        log.record(RunEvent(phase="done", run_id="a"))

        assert [e.phase for e in log.events("a")] == ["start", "done"]
        assert log.run_ids() == ["a", "b"]
        assert log.last_run_id == "a"

    def it_evicts_the_oldest_events_past_the_limit():
        log = RunEventLog(limit=3)
        for i in range(5):
            log.record(RunEvent(phase=f"p{i}", run_id="r"))

        assert [e.phase for e in log.events("r")] == ["p2", "p3", "p4"]

    def it_defaults_to_the_last_run():
        log = RunEventLog()
        log.record(RunEvent(phase="x", run_id="r1"))
        assert [e.phase for e in log.events()] == ["x"]

    def it_returns_a_copy():
        log = RunEventLog()
        log.record(RunEvent(phase="x", run_id="r"))
        log.events("r").clear()
        assert len(log.events("r")) == 1

    def it_handles_concurrent_producers():
        log = RunEventLog(limit=10_000)

        def produce(n):
            for i in range(500):
                log.record(RunEvent(phase=f"{n}-{i}", run_id="r"))

        threads = [threading.Thread(target=produce, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(log.events("r")) == 2000

    def it_returns_nothing_for_unknown_runs():
        assert RunEventLog().events("missing") == []


def describe_EventRecorder():
    def it_stamps_run_id_and_time():
        log = RunEventLog()
        recorder = EventRecorder(log, "20240101T000000Z")

        event = recorder.emit("search-code", group="g", page=2)

        assert event.run_id == "20240101T000000Z"
        assert event.ts.endswith("Z")
        assert log.events("20240101T000000Z") == [event]

    def it_drops_empty_fields_when_serialized():
        event = RunEvent(phase="start", run_id="r", ts="t", note="hi")
        assert event.to_dict() == {"phase": "start", "run_id": "r", "ts": "t", "note": "hi"}
