"""Per-attempt context passed through hooks."""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from .options import FetchOptions
    from .response import FetchResponse


@dataclass
class FetchContext:
    """Context passed through hook chains during one attempt.

    Hooks may read everything and may replace ``response`` or set ``error``;
    ``request`` stays a URL string.

    Attributes:
        request: Request target (URL)
        options: Effective options for this call
        response: Response once received
        error: Error set by the transport or by a hook
        attempt: 1-based attempt number within the call
        request_id: Identifier shared by all attempts of one call

    Example:
        >>> async def on_request(ctx: FetchContext, next):
        ...     ctx.options.headers["x-request-id"] = ctx.request_id
        ...     await next()
    """

    request: str
    options: "FetchOptions"
    response: Optional["FetchResponse"] = None
    error: Optional[BaseException] = None
    attempt: int = 1
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def next_attempt(self) -> "FetchContext":
        """Fresh context for the following attempt of the same call."""
        return FetchContext(
            request=self.request,
            options=self.options,
            attempt=self.attempt + 1,
            request_id=self.request_id,
        )
