"""
Request options and the option merger.

``FetchOptions`` is the option set of one call or the defaults of one client.
Every field is optional: ``None`` means "not set here", so merging can tell
an explicit value from an absent one.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union, TYPE_CHECKING

import httpx

from .hooks import HOOK_NAMES, HookChain

if TYPE_CHECKING:
    from .cancellation import AbortSignal
    from .response import ResponseType


# Fields merged key-by-key instead of replaced.
_MAP_FIELDS = ("params", "query")


@dataclass
class FetchOptions:
    """
    Options of a fetch call.

    Args:
        method: HTTP method (default GET)
        headers: Request headers, case-insensitive
        body: Raw body (bytes/str/stream/FormData) or JSON-serializable value
        base_url: Prefix joined with relative request targets
        params: Query parameters
        query: Query parameters (applied after ``params``)
        response_type: Force a parsing strategy (json/text/blob/arrayBuffer/stream)
        parse_response: ``(context) -> data`` custom parser, may be async
        ignore_response_error: Return 4xx/5xx responses instead of raising
        duplex: "half" for streamed request bodies
        timeout: Per-attempt timeout in milliseconds
        signal: Caller AbortSignal
        retry: Number of retries, or False to disable
        retry_delay: Milliseconds, ``(context) -> ms`` or a RetryDelay strategy
        retry_status_codes: Status codes eligible for retry
        on_request / on_request_error / on_response / on_response_error / has_body:
            Hook slots, each a hook, a list of hooks or a HookChain
        create_fetch_error: ``(context) -> FetchError`` override
        stringify_query: ``(mapping) -> str`` query serializer
        parse_query: ``(str) -> dict`` query parser
        extra: Transport-specific keyword arguments

    Examples:
        >>> FetchOptions(method="POST", body={"name": "alice"}, retry=2)
        >>> FetchOptions.from_value({"timeout": 5000}, headers={"x-api-key": "secret"})
    """

    method: Optional[str] = None
    headers: Optional[httpx.Headers] = None
    body: Any = None
    base_url: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    query: Optional[Dict[str, Any]] = None
    response_type: Optional[Union[str, "ResponseType"]] = None
    parse_response: Optional[Callable[..., Any]] = None
    ignore_response_error: Optional[bool] = None
    duplex: Optional[str] = None
    timeout: Optional[float] = None
    signal: Optional["AbortSignal"] = None
    retry: Optional[Union[int, bool]] = None
    retry_delay: Any = None
    retry_status_codes: Optional[Iterable[int]] = None

    on_request: Optional[HookChain] = None
    on_request_error: Optional[HookChain] = None
    on_response: Optional[HookChain] = None
    on_response_error: Optional[HookChain] = None
    has_body: Optional[HookChain] = None

    create_fetch_error: Optional[Callable[..., Any]] = None
    stringify_query: Optional[Callable[[Mapping[str, Any]], str]] = None
    parse_query: Optional[Callable[[str], Dict[str, Any]]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Normalize headers, maps and hook slots."""
        if self.headers is not None and not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)
        for name in _MAP_FIELDS:
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, dict(value))
        for name in HOOK_NAMES:
            value = getattr(self, name)
            if value is not None and not isinstance(value, HookChain):
                setattr(self, name, HookChain.of(value))
        if self.retry_status_codes is not None:
            self.retry_status_codes = frozenset(self.retry_status_codes)
        if self.method:
            self.method = self.method.upper()

    @classmethod
    def from_value(
        cls,
        value: Union[None, "FetchOptions", Mapping[str, Any]] = None,
        **overrides: Any
    ) -> "FetchOptions":
        """
        Build options from a FetchOptions, a mapping and/or keyword arguments.

        Unknown keys end up in ``extra`` and are handed to the transport.

        Example:
            >>> FetchOptions.from_value({"method": "post"}, follow_redirects=False).extra
            {'follow_redirects': False}
        """
        if isinstance(value, FetchOptions) and not overrides:
            return value

        data: Dict[str, Any] = {}
        if isinstance(value, FetchOptions):
            data.update(value.to_dict())
        elif value is not None:
            data.update(value)
        data.update(overrides)

        known = {f.name for f in fields(cls)}
        extra = dict(data.pop("extra", None) or {})
        for key in list(data):
            if key not in known:
                extra[key] = data.pop(key)
        return cls(extra=extra, **data)

    def to_dict(self) -> Dict[str, Any]:
        """Shallow dict of the set fields."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "extra":
                if value:
                    result["extra"] = dict(value)
            elif value is not None:
                result[f.name] = value
        return result

    def copy(self, **changes: Any) -> "FetchOptions":
        """Shallow copy with ``changes``; headers and maps are copied too."""
        clone = replace(self, **changes)
        if "headers" not in changes and clone.headers is not None:
            clone.headers = httpx.Headers(clone.headers)
        for name in _MAP_FIELDS:
            if name not in changes and getattr(clone, name) is not None:
                setattr(clone, name, dict(getattr(clone, name)))
        if "extra" not in changes:
            clone.extra = dict(clone.extra)
        return clone


def merge_headers(
    input: Optional[httpx.Headers],
    defaults: Optional[httpx.Headers]
) -> Optional[httpx.Headers]:
    """
    Case-insensitive header merge, ``input`` values win per key.

    Example:
        >>> merged = merge_headers(httpx.Headers({"X-A": "1"}), httpx.Headers({"x-a": "0", "x-b": "2"}))
        >>> dict(merged)
        {'x-b': '2', 'x-a': '1'}
    """
    if input is None and defaults is None:
        return None
    if input is None:
        return httpx.Headers(defaults)
    if defaults is None:
        return httpx.Headers(input)

    # A key present in input replaces every default value for that key.
    overridden = {key.lower() for key in input.keys()}
    items: List[Tuple[str, str]] = [
        (key, value) for key, value in defaults.multi_items() if key.lower() not in overridden
    ]
    items.extend(input.multi_items())
    return httpx.Headers(items)


def merge_options(
    input: Optional[FetchOptions],
    defaults: Optional[FetchOptions]
) -> FetchOptions:
    """
    Combine call-site options with client defaults.

    Rules:
        - every field set on ``input`` wins over the default;
        - ``params`` and ``query`` are merged key by key (input wins);
        - ``headers`` are merged case-insensitively (input wins);
        - every hook slot becomes a chain in which input hooks wrap the
          default hooks, controlling them through ``next()``;
        - ``extra`` is merged key by key (input wins).

    Neither argument is modified.

    Args:
        input: Call-site options
        defaults: Client default options

    Returns:
        New FetchOptions

    Examples:
        >>> merged = merge_options(
        ...     FetchOptions(query={"a": 1}, headers={"x-a": "1"}),
        ...     FetchOptions(query={"b": 2}, headers={"X-A": "0"}),
        ... )
        >>> merged.query
        {'b': 2, 'a': 1}
    """
    input = input or FetchOptions()
    defaults = defaults or FetchOptions()

    merged = defaults.copy()
    for f in fields(FetchOptions):
        value = getattr(input, f.name)
        if f.name in HOOK_NAMES or f.name in _MAP_FIELDS or f.name in ("headers", "extra"):
            continue
        if value is not None:
            setattr(merged, f.name, value)

    for name in _MAP_FIELDS:
        default_map = getattr(defaults, name)
        input_map = getattr(input, name)
        if default_map is not None or input_map is not None:
            setattr(merged, name, {**(default_map or {}), **(input_map or {})})

    merged.headers = merge_headers(input.headers, defaults.headers)
    merged.extra = {**defaults.extra, **input.extra}

    for name in HOOK_NAMES:
        input_chain = HookChain.of(getattr(input, name))
        default_chain = HookChain.of(getattr(defaults, name))
        setattr(merged, name, input_chain.wrap(default_chain))

    return merged
