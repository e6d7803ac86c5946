"""
Query-string codec and URL composition helpers.

``stringify_query`` / ``parse_query`` are the default codec; any pair of
callables with the same shapes can be passed through the ``stringify_query``
and ``parse_query`` options.
"""

import json
import re
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

_PROTOCOL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:(//)?")


def has_protocol(url: str) -> bool:
    """``https://host``, ``//host`` and ``data:`` style targets are absolute."""
    return url.startswith("//") or bool(_PROTOCOL_RE.match(url))


def _encode(value: str) -> str:
    return quote(value, safe="-_.!~*'()")


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def stringify_query(query: Mapping[str, Any]) -> str:
    """
    Serialize a mapping into a query string.

    - ``None`` values are dropped;
    - lists/tuples repeat the key;
    - booleans render as ``true``/``false``;
    - nested mappings render as compact JSON.

    Examples:
        >>> stringify_query({"tag": ["a", "b"], "page": 2, "draft": False, "skip": None})
        'tag=a&tag=b&page=2&draft=false'
    """
    pairs: List[str] = []
    for key, value in query.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if item is None:
                continue
            pairs.append(f"{_encode(str(key))}={_encode(_render(item))}")
    return "&".join(pairs)


def parse_query(query: str) -> Dict[str, Any]:
    """
    Parse a query string; repeated keys become lists.

    Example:
        >>> parse_query("?tag=a&tag=b&page=2")
        {'tag': ['a', 'b'], 'page': '2'}
    """
    result: Dict[str, Any] = {}
    for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
        if key in result:
            existing = result[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[key] = [existing, value]
        else:
            result[key] = value
    return result


def with_query(
    url: str,
    query: Optional[Mapping[str, Any]],
    stringify: Optional[Callable[[Mapping[str, Any]], str]] = None,
    parse: Optional[Callable[[str], Dict[str, Any]]] = None,
) -> str:
    """
    Merge ``query`` into the query string already present in ``url``.

    Keys from ``query`` win; a ``None`` value removes the key.

    Example:
        >>> with_query("/search?q=old&page=1#top", {"q": "new"})
        '/search?q=new&page=1#top'
    """
    if not query:
        return url

    stringify = stringify or stringify_query
    parse = parse or parse_query

    parts = urlsplit(url)
    merged = {**parse(parts.query), **query}
    merged = {key: value for key, value in merged.items() if value is not None}
    return urlunsplit(parts._replace(query=stringify(merged)))


def join_url(base: Optional[str], path: str) -> str:
    """
    Join ``base`` and ``path`` with exactly one slash between them.

    Absolute ``path`` values and paths already under ``base`` are kept as-is.

    Examples:
        >>> join_url("https://api.example.com/v1/", "/users")
        'https://api.example.com/v1/users'
        >>> join_url("https://api.example.com", "https://other.example.com/x")
        'https://other.example.com/x'
    """
    if not base or base == "/":
        return path
    if not path or path == "/":
        return base
    if has_protocol(path):
        return path

    base_stripped = base.rstrip("/")
    if path == base_stripped or path.startswith(base_stripped + "/") or path.startswith(base_stripped + "?"):
        return path

    return f"{base_stripped}/{path.lstrip('/')}"

