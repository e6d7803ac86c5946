"""
Request body helpers.

JSON-serializable bodies of payload methods are encoded once per call;
binary, form and stream bodies are passed to the transport unchanged.
"""

import dataclasses
import json
from typing import Any, IO, List, Optional, Tuple, Union

from pydantic import BaseModel

from ..core.retry_engine import PAYLOAD_METHODS


def is_payload_method(method: Optional[str] = "GET") -> bool:
    """PATCH, POST, PUT and DELETE carry a body."""
    return (method or "GET").upper() in PAYLOAD_METHODS


class FormData:
    """
    Multipart/urlencoded form body.

    Text fields go to ``fields``; values with a filename (or bytes/file
    objects) go to ``files``. Transports send it as multipart when any file
    is present, otherwise urlencoded.

    Example:
        >>> form = FormData()
        >>> form.append("name", "alice")
        >>> form.append("avatar", b"...", filename="a.png", content_type="image/png")
        >>> await fetch("/upload", method="POST", body=form)
    """

    def __init__(self):
        self.fields: List[Tuple[str, str]] = []
        self.files: List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]] = []

    def append(
        self,
        name: str,
        value: Union[str, bytes, IO[bytes], Any],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> "FormData":
        if filename is not None or isinstance(value, (bytes, bytearray)) or hasattr(value, "read"):
            self.files.append((name, (filename or name, value, content_type)))
        else:
            self.fields.append((name, value if isinstance(value, str) else str(value)))
        return self

    @property
    def is_multipart(self) -> bool:
        return bool(self.files)

    def __len__(self) -> int:
        return len(self.fields) + len(self.files)

    def __repr__(self) -> str:
        return f"FormData(fields={[k for k, _ in self.fields]}, files={[k for k, _ in self.files]})"


def is_stream_like(value: Any) -> bool:
    """Async iterables, iterators/generators and file objects."""
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return False
    return hasattr(value, "__aiter__") or hasattr(value, "__next__") or hasattr(value, "read")


def is_json_serializable(value: Any) -> bool:
    """
    Whether ``value`` is sent as JSON.

    Examples:
        >>> is_json_serializable({"a": 1}), is_json_serializable("raw text")
        (True, True)
        >>> is_json_serializable(b"bytes"), is_json_serializable(FormData())
        (False, False)
    """
    if value is None:
        return False
    if isinstance(value, (str, bool, int, float)):
        return True
    if isinstance(value, (bytes, bytearray, memoryview, FormData)):
        return False
    if isinstance(value, (dict, list, tuple)):
        return True
    if isinstance(value, BaseModel):
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    return False


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_body(value: Any) -> str:
    """
    Encode a JSON-serializable body; strings are sent unchanged.

    Example:
        >>> serialize_body({"name": "alice"})
        '{"name": "alice"}'
    """
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, default=_json_default)
