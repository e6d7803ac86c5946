"""Raw-send implementations."""

from .base import RawRequest, RawSend
from .httpx_transport import HttpxTransport
from .requests_transport import RequestsTransport

__all__ = [
    "RawRequest",
    "RawSend",
    "HttpxTransport",
    "RequestsTransport",
]
