"""Load query groups from a queries.yaml document."""

from pathlib import Path

import yaml

from .models import Group, QuerySpecification, SearchDefinition


class QuerySpecError(ValueError):
    """Raised when a queries document cannot be used."""


def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _parse_search(raw, group_name: str) -> SearchDefinition:
    if not isinstance(raw, dict):
        raise QuerySpecError(f"search entries in group {group_name!r} must be mappings")
    name = str(raw.get("name") or "").strip()
    if not name:
        raise QuerySpecError(f"search without a name in group {group_name!r}")
    return SearchDefinition(
        name=name,
        kind=str(raw.get("type") or "").strip(),
        query=str(raw.get("query") or ""),
        enabled=_as_bool(raw.get("enabled"), False),
    )


def parse_queries(text: str) -> QuerySpecification:
    """Parse a queries.yaml document into a QuerySpecification."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise QuerySpecError(f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise QuerySpecError("queries document must be a mapping")
    raw_groups = data.get("groups")
    if not raw_groups:
        raise QuerySpecError("no groups in queries document")
    if not isinstance(raw_groups, list):
        raise QuerySpecError("'groups' must be a list")

    groups = []
    for raw in raw_groups:
        if not isinstance(raw, dict):
            raise QuerySpecError("group entries must be mappings")
        name = str(raw.get("name") or "").strip()
        searches = raw.get("searches") or []
        if not isinstance(searches, list):
            raise QuerySpecError(f"'searches' in group {name!r} must be a list")
        groups.append(
            Group(
                name=name,
                enabled=_as_bool(raw.get("enabled"), False),
                searches=tuple(_parse_search(s, name) for s in searches),
            )
        )
    return QuerySpecification(groups=tuple(groups))


def load_queries(path: Path | str) -> QuerySpecification:
    """Read and parse a queries file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise QuerySpecError(f"cannot read {path}: {e}") from e
    return parse_queries(text)


DEFAULT_QUERIES_YAML = """\
# queries.yaml
# Toggle 'enabled' to include/exclude groups or searches.
# Code searches are sorted by index date; repo searches get a pushed:>= filter automatically.

groups:
  - name: Polygon.io
    enabled: true
    searches:
      - name: Polygon REST endpoints
        type: code
        enabled: true
        query: "\\"api.polygon.io\\""
      - name: Polygon Python usage
        type: code
        enabled: true
        query: "\\"import polygon\\" OR \\"from polygon\\" language:python"
      - name: Go module
        type: code
        enabled: true
        query: "filename:go.mod \\"github.com/polygon-io\\""
      - name: Repo mention (README/desc)
        type: repo
        enabled: true
        query: "(polygon OR \\"api.polygon.io\\") in:readme,description"

  - name: Alpaca
    enabled: true
    searches:
      - name: Alpaca REST endpoints
        type: code
        enabled: true
        query: "\\"api.alpaca.markets\\" OR \\"paper-api.alpaca.markets\\""
      - name: Alpaca Python client
        type: code
        enabled: true
        query: "\\"import alpaca_trade_api\\" language:python"
      - name: Go client
        type: code
        enabled: true
        query: "\\"github.com/alpacahq/alpaca-trade-api-go\\" language:go"
      - name: Repo mention
        type: repo
        enabled: true
        query: "(alpaca OR \\"alpaca.markets\\") in:readme,description"

  - name: IBKR
    enabled: true
    searches:
      - name: ibapi / ib_insync (Python)
        type: code
        enabled: true
        query: "\\"import ibapi\\" OR \\"from ibapi\\" OR \\"import ib_insync\\" OR \\"from ib_insync\\" language:python"
      - name: Java client classes
        type: code
        enabled: true
        query: "\\"com.ib.client\\" language:java"
      - name: Repo mention
        type: repo
        enabled: true
        query: "(ibkr OR ibapi OR \\"Interactive Brokers\\") in:readme,description"

  - name: Databento
    enabled: true
    searches:
      - name: Databento Python
        type: code
        enabled: true
        query: "\\"import databento\\" OR \\"from databento\\" language:python"
      - name: Endpoints / hostnames
        type: code
        enabled: true
        query: "\\"hist.databento.com\\" OR \\"live.databento.com\\""
      - name: Repo mention
        type: repo
        enabled: true
        query: "databento in:readme,description"
"""
