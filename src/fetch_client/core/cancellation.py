"""Cooperative cancellation primitives for the request pipeline.

:class:`AbortController` owns an :class:`AbortSignal`; the signal is handed to
the raw-send capability and to anything else that should stop when the call
is cancelled. :meth:`AbortSignal.any` links several upstream signals into one
(the caller's signal and the per-attempt timeout signal), and
:func:`timeout_signal` is the scoped timer that guarantees the scheduled abort
is cancelled on every exit path.
"""

import asyncio
import contextlib
from typing import Any, Awaitable, Callable, Iterable, Iterator, List, Optional, TypeVar

from .exceptions import AbortError, TimeoutError

T = TypeVar("T")

Listener = Callable[["AbortSignal"], None]


class AbortSignal:
    """Read side of a cancellation token.

    Examples:
        >>> controller = AbortController()
        >>> signal = controller.signal
        >>> controller.abort()
        >>> signal.aborted
        True
    """

    def __init__(self) -> None:
        self._aborted = False
        self._reason: Optional[BaseException] = None
        self._listeners: List[Listener] = []
        self._event: Optional[asyncio.Event] = None
        self._cleanup: List[Callable[[], None]] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> Optional[BaseException]:
        return self._reason

    def throw_if_aborted(self) -> None:
        """Raise the abort reason if the signal has fired."""
        if self._aborted:
            raise self._reason  # type: ignore[misc]

    def add_listener(self, listener: Listener) -> None:
        """Register ``listener``; it is called immediately if already aborted."""
        if self._aborted:
            listener(self)
            return
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    async def wait(self) -> BaseException:
        """Suspend until the signal fires and return its reason."""
        if not self._aborted:
            if self._event is None:
                self._event = asyncio.Event()
            await self._event.wait()
        return self._reason  # type: ignore[return-value]

    def _abort(self, reason: Optional[BaseException]) -> None:
        if self._aborted:
            return
        self._aborted = True
        self._reason = reason if reason is not None else AbortError()
        if self._event is not None:
            self._event.set()
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(self)
        self.dispose()

    def dispose(self) -> None:
        """Detach from upstream signals (no-op for plain signals)."""
        cleanup, self._cleanup = self._cleanup, []
        for fn in cleanup:
            fn()

    @classmethod
    def any(cls, signals: Iterable[Optional["AbortSignal"]]) -> "AbortSignal":
        """
        Build a signal that aborts as soon as any of ``signals`` aborts.

        The linked signal takes the reason of whichever upstream fired first.
        Call :meth:`dispose` once the signal is no longer needed so upstream
        signals stop holding a reference to it.

        Example:
            >>> combined = AbortSignal.any([caller_signal, timeout_signal])
            >>> try:
            ...     await run_until_aborted(send(request, combined), combined)
            ... finally:
            ...     combined.dispose()
        """
        linked = cls()
        upstream = [s for s in signals if s is not None]

        def on_abort(source: "AbortSignal") -> None:
            linked._abort(source.reason)

        for signal in upstream:
            if signal.aborted:
                linked._abort(signal.reason)
                return linked

        for signal in upstream:
            signal.add_listener(on_abort)
            linked._cleanup.append(lambda s=signal: s.remove_listener(on_abort))
        return linked

    @classmethod
    def abort(cls, reason: Optional[BaseException] = None) -> "AbortSignal":
        """Return an already aborted signal."""
        signal = cls()
        signal._abort(reason)
        return signal

    def __repr__(self) -> str:
        return f"AbortSignal(aborted={self._aborted}, reason={self._reason!r})"


class AbortController:
    """Write side of a cancellation token."""

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: Optional[BaseException] = None) -> None:
        """Fire the signal; later calls are ignored."""
        self.signal._abort(reason)


@contextlib.contextmanager
def timeout_signal(timeout: Optional[float]) -> Iterator[Optional[AbortSignal]]:
    """
    Scoped timeout: yields a signal that aborts with :class:`TimeoutError`.

    The timer is armed on the running loop with ``call_later`` and is
    cancelled when the block exits, whatever the outcome. Yields ``None``
    when ``timeout`` is unset or not positive.

    Args:
        timeout: Timeout in milliseconds
    """
    if not timeout or timeout <= 0:
        yield None
        return

    controller = AbortController()
    loop = asyncio.get_running_loop()
    handle = loop.call_later(
        timeout / 1000,
        controller.abort,
        TimeoutError(timeout=timeout),
    )
    try:
        yield controller.signal
    finally:
        handle.cancel()


async def run_until_aborted(awaitable: Awaitable[T], signal: Optional[AbortSignal]) -> T:
    """
    Await ``awaitable`` unless ``signal`` fires first.

    The losing side is cancelled: if the signal wins, the in-flight task is
    cancelled and awaited before the abort reason is raised.
    """
    if signal is None:
        return await awaitable

    # An already aborted signal still lets the send start, so the transport
    # observes the aborted signal the same way it would mid-flight.
    task: "asyncio.Future[T]" = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
            await _drain(task)

    if signal.aborted:
        if task.done() and not task.cancelled():
            await _release(task)
        signal.throw_if_aborted()
    if task.cancelled():
        raise asyncio.CancelledError()
    return task.result()


async def _release(task: "asyncio.Future[Any]") -> None:
    """Discard the outcome of a send that lost the race to the signal."""
    if task.exception() is not None:
        return
    close = getattr(task.result(), "aclose", None)
    if close is not None:
        await close()


async def _drain(task: "asyncio.Future[Any]") -> None:
    try:
        await task
    except asyncio.CancelledError:
        if not task.cancelled():
            raise
    except Exception:
        # The result of an abandoned send is irrelevant once the signal fired.
        return
