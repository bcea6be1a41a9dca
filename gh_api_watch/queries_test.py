"""Unit tests for the queries.yaml loader."""

from pathlib import Path

import pytest

from .queries import DEFAULT_QUERIES_YAML, QuerySpecError, load_queries, parse_queries

DOC = """
groups:
  - name: Alpaca
    enabled: true
    searches:
      - name: REST
        type: code
        enabled: true
        query: '"api.alpaca.markets"'
      - name: Repo mention
        type: repo
        enabled: false
        query: alpaca in:readme
  - name: Off
    enabled: false
    searches:
      - name: Hidden
        type: code
        enabled: true
        query: hidden
"""


def describe_parse_queries():
    def it_parses_groups_and_searches():
        spec = parse_queries(DOC)

        assert [g.name for g in spec.groups] == ["Alpaca", "Off"]
        rest = spec.groups[0].searches[0]
        assert rest.kind == "code"
        assert rest.query == '"api.alpaca.markets"'
        assert rest.enabled is True

    def it_yields_only_enabled_searches_in_order():
        spec = parse_queries(DOC)
        assert [(g.name, s.name) for g, s in spec.enabled_searches()] == [("Alpaca", "REST")]

    def it_can_exclude_repo_searches():
        spec = parse_queries(
            "groups: [{name: g, enabled: true, searches: ["
            "{name: a, type: repo, enabled: true, query: x},"
            "{name: b, type: code, enabled: true, query: y}]}]"
        )
        assert [s.name for _, s in spec.enabled_searches(include_repo=False)] == ["b"]
        assert [s.name for _, s in spec.enabled_searches()] == ["a", "b"]

    def it_defaults_enabled_to_false():
        spec = parse_queries("groups: [{name: g, searches: [{name: s, type: code, query: q}]}]")
        assert spec.groups[0].enabled is False
        assert spec.groups[0].searches[0].enabled is False

    def it_rejects_documents_without_groups():
        with pytest.raises(QuerySpecError, match="no groups"):
            parse_queries("groups: []")
        with pytest.raises(QuerySpecError, match="no groups"):
            parse_queries("")

    def it_rejects_invalid_yaml():
        with pytest.raises(QuerySpecError, match="invalid YAML"):
            parse_queries("groups: [unclosed")

    def it_rejects_searches_without_names():
        with pytest.raises(QuerySpecError):
            parse_queries("groups: [{name: g, searches: [{type: code}]}]")

    def it_parses_the_default_document():
        spec = parse_queries(DEFAULT_QUERIES_YAML)
        names = [g.name for g in spec.groups]
        assert names == ["Polygon.io", "Alpaca", "IBKR", "Databento"]
        first = spec.groups[0].searches[0]
        assert first.query == '"api.polygon.io"'
        assert len(list(spec.enabled_searches())) == 14


def describe_load_queries():
    def it_reads_a_file(tmp_path: Path):
        path = tmp_path / "queries.yaml"
        path.write_text(DOC)
        assert len(load_queries(path).groups) == 2

    def it_raises_for_missing_files(tmp_path: Path):
        with pytest.raises(QuerySpecError, match="cannot read"):
            load_queries(tmp_path / "missing.yaml")
