"""Integration tests for the command line entry point."""

import json

import httpx
import pytest
from conftest import code_item, search_response

from gh_api_watch.cli import main
from gh_api_watch.settings import Settings

QUERIES = """
groups:
  - name: Alpaca
    enabled: true
    searches:
      - name: REST
        type: code
        enabled: true
        query: '"api.alpaca.markets"'
"""


@pytest.fixture
def queries_file(tmp_path):
    path = tmp_path / "queries.yaml"
    path.write_text(QUERIES)
    return path


@pytest.fixture(autouse=True)
def _offline(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr("gh_api_watch.settings.get_settings", lambda: Settings())
    monkeypatch.setattr("gh_api_watch.rate_governor.compute_wait", lambda *args, **kwargs: 0.0)


@pytest.fixture
def use_github(monkeypatch):
    def install(github):
        monkeypatch.setattr("gh_api_watch.orchestrator.GitHubClient", lambda token=None: github)
        return github

    return install


def describe_run():
    def it_prints_findings_as_json_and_writes_events(make_github, use_github, queries_file, tmp_path, capsys):
        use_github(
            make_github(
                lambda kind, q, page, url: search_response([code_item("o/r", "trade.py")] if page == 1 else []),
                commits={("o/r", "trade.py"): "2999-01-01T00:00:00Z"},
            )
        )
        events_path = tmp_path / "events.json"

        main(["run", "--queries", str(queries_file), "--json", "--events", str(events_path)])

        findings = json.loads(capsys.readouterr().out)
        assert [h["file_path"] for h in findings["code_hits"]] == ["trade.py"]
        assert findings["code_hits"][0]["commit_date"] == "2999-01-01T00:00:00Z"
        assert findings["days_back"] == 7

        events = json.loads(events_path.read_text())
        assert events["run_id"] == findings["run_id"]
        assert events["events"][0]["phase"] == "start"
        assert events["events"][-1]["phase"] == "search-summary"

    def it_prints_a_markdown_report_by_default(make_github, use_github, queries_file, capsys):
        use_github(make_github(lambda kind, q, page, url: search_response([])))

        main(["run", "--queries", str(queries_file), "--days-back", "3"])

        out = capsys.readouterr().out
        assert "(last 3 days)" in out
        assert "- No code hits returned for Alpaca / REST" in out

    def it_exits_1_on_a_search_error(make_github, use_github, queries_file, tmp_path):
        def search(kind, q, page, url):
            raise httpx.ConnectError("no route to host")

        use_github(make_github(search))
        events_path = tmp_path / "events.json"

        with pytest.raises(SystemExit) as exc:
            main(["run", "--queries", str(queries_file), "--events", str(events_path)])

        assert exc.value.code == 1
        phases = [e["phase"] for e in json.loads(events_path.read_text())["events"]]
        assert phases[-1] == "error"

    def it_exits_3_when_the_run_times_out(make_github, use_github, queries_file, monkeypatch):
        github = use_github(make_github(lambda kind, q, page, url: search_response([])))
        monkeypatch.setattr("gh_api_watch.orchestrator.compute_budget", lambda spec, options: 0.0)

        with pytest.raises(SystemExit) as exc:
            main(["run", "--queries", str(queries_file)])

        assert exc.value.code == 3
        assert github.calls == []

    def it_rejects_an_unreadable_queries_file_as_a_usage_error(tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["run", "--queries", str(tmp_path / "missing.yaml")])
        assert exc.value.code == 2


def describe_default_queries():
    def it_prints_the_starter_document(capsys):
        main(["default-queries"])
        out = capsys.readouterr().out
        assert "groups:" in out
        assert '"api.polygon.io"' in out
