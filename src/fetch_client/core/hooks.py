"""
Hook chains: middleware-style lifecycle hooks with explicit continuation.

Every hook slot holds a :class:`HookChain`, an ordered tuple of stages built
by the option merger. A stage is ``hook(context, next)``; it may be a plain
function or a coroutine function, and it runs the rest of the chain by
calling (and usually awaiting) ``next()``. The first stage is the outermost
one, so call-site hooks wrap client defaults.

Example:
    >>> async def timing(ctx, next):
    ...     started = time.monotonic()
    ...     await next()
    ...     ctx.options.extra["elapsed"] = time.monotonic() - started
"""

import inspect
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple, Union

from .context import FetchContext

Next = Callable[[], Awaitable[Any]]
Hook = Callable[[FetchContext, Next], Any]

HOOK_NAMES: Tuple[str, ...] = (
    "on_request",
    "on_request_error",
    "on_response",
    "on_response_error",
    "has_body",
)


async def noop() -> None:
    """Terminal continuation."""
    return None


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class _Continuation:
    """
    Awaitable returned by ``next()``.

    Runs the remaining stages at most once. A synchronous hook that calls
    ``next()`` without awaiting it leaves the continuation pending; the
    chain settles it right after the hook returns.
    """

    __slots__ = ("_run", "called", "done", "result")

    def __init__(self, run: Callable[[], Awaitable[Any]]):
        self._run = run
        self.called = False
        self.done = False
        self.result: Any = None

    def __call__(self) -> "_Continuation":
        self.called = True
        return self

    def __await__(self):
        return self.settle().__await__()

    async def settle(self) -> Any:
        if not self.done:
            self.done = True
            self.result = await self._run()
        return self.result


class HookChain:
    """
    Ordered, immutable composition of hook stages for one slot.

    Args:
        stages: Hooks from outermost to innermost
    """

    __slots__ = ("stages",)

    def __init__(self, stages: Iterable[Hook] = ()):
        self.stages: Tuple[Hook, ...] = tuple(stages)

    @classmethod
    def of(cls, value: Union[None, Hook, "HookChain", Iterable[Hook]]) -> "HookChain":
        """Normalize an option value (hook, list of hooks, chain or None)."""
        if value is None:
            return cls()
        if isinstance(value, HookChain):
            return value
        if callable(value):
            return cls((value,))
        return cls(value)

    def wrap(self, inner: "HookChain") -> "HookChain":
        """Chain whose stages run before (around) ``inner``'s stages."""
        return HookChain(self.stages + inner.stages)

    async def __call__(self, context: FetchContext, next: Next = noop) -> Any:
        return await self._run(0, context, next)

    async def _run(self, index: int, context: FetchContext, tail: Next) -> Any:
        if index >= len(self.stages):
            return await maybe_await(tail())

        continuation = _Continuation(lambda: self._run(index + 1, context, tail))
        result = await maybe_await(self.stages[index](context, continuation))
        if continuation.called and not continuation.done:
            await continuation.settle()
        return result

    def __bool__(self) -> bool:
        return bool(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        names = [getattr(s, "__qualname__", repr(s)) for s in self.stages]
        return f"HookChain({names})"


async def run_hooks(chain: Optional[HookChain], context: FetchContext) -> Any:
    """
    Run one hook slot to completion for ``context``.

    Returns whatever the outermost stage returned (used by ``has_body``).
    """
    if not chain:
        return None
    return await chain(context, noop)
