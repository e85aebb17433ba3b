"""Query-string construction for the 42 API.

The upstream expects bracketed keys such as ``filter[login]`` and
``page[size]`` exactly as written, so keys are emitted verbatim and only
values are percent-encoded.
"""

from typing import Any, Mapping, Optional
from urllib.parse import quote

# Characters encodeURIComponent leaves alone
_UNRESERVED = "-_.!~*'()"


def encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return quote(str(value), safe=_UNRESERVED)


def build_query(query: Optional[Mapping[str, Any]]) -> str:
    """Render an ordered mapping as a query string, skipping None values."""
    if not query:
        return ""
    parts = [f"{key}={encode_value(value)}" for key, value in query.items() if value is not None]
    return "&".join(parts)


def with_query(path: str, query: Optional[Mapping[str, Any]]) -> str:
    qs = build_query(query)
    if not qs:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{qs}"
