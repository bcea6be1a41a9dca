"""Normalize and URL-encode GitHub search query strings."""

import re
from datetime import datetime
from urllib.parse import quote_plus

from .models import CODE

# Code search rejects fork qualifiers outright
_FORK_QUALIFIER = re.compile(r"\bfork\s*:\s*(true|false|only)\b", re.IGNORECASE)

# Escapes restored after encoding so GitHub still sees search operators:
# qualifiers (language:python), grouping, ranges (pushed:>=...), lists, paths, alternation
_OPERATOR_ESCAPES = {
    "%3A": ":",
    "%28": "(",
    "%29": ")",
    "%3E": ">",
    "%3C": "<",
    "%3D": "=",
    "%2C": ",",
    "%2F": "/",
    "%7C": "|",
}
_OPERATOR_ESCAPE_RE = re.compile("|".join(_OPERATOR_ESCAPES), re.IGNORECASE)


def sanitize_query(query: str, kind: str = CODE) -> str:
    """Strip unsupported qualifiers and collapse whitespace."""
    if kind.lower() == CODE:
        query = _FORK_QUALIFIER.sub("", query)
    return " ".join(query.split())


def encode_query(query: str) -> str:
    """Percent-encode a query, keeping search-operator punctuation literal."""
    encoded = quote_plus(query.strip())
    return _OPERATOR_ESCAPE_RE.sub(lambda m: _OPERATOR_ESCAPES[m.group(0).upper()], encoded)


def encode_query_strict(query: str) -> str:
    """Fully percent-encode a query. Used when GitHub rejects the lenient form."""
    return quote_plus(query.strip())


def with_pushed_since(query: str, since: datetime) -> str:
    """Append the repository search recency qualifier."""
    return f"{query} pushed:>={since.strftime('%Y-%m-%d')}"
