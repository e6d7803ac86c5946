"""Raw-send interface between the pipeline and a transport."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, TYPE_CHECKING

import httpx

from ..core.response import FetchResponse

if TYPE_CHECKING:
    from ..core.cancellation import AbortSignal


@dataclass
class RawRequest:
    """
    Fully built request handed to the raw send.

    Attributes:
        method: Upper-cased HTTP method
        url: Final URL (base URL and query applied)
        headers: Request headers
        body: Serialized body, FormData, stream or None
        duplex: "half" for streamed bodies
        timeout: Per-attempt timeout (ms), informational for transports
        extra: Transport-specific keyword arguments from the options
    """

    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Any = None
    duplex: Optional[str] = None
    timeout: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)


class RawSend(Protocol):
    """
    ``await send(request, signal) -> FetchResponse``.

    Must raise a NetworkError (or subclass) when no response is obtained.
    Cancellation is delivered by cancelling the awaiting task when
    ``signal`` fires; implementations may also consult ``signal`` directly.
    """

    async def __call__(self, request: RawRequest, signal: Optional["AbortSignal"]) -> FetchResponse:
        ...
