"""
Retry engine для повторных попыток запроса.

Включает:
- Бюджет повторов (retry / False / значение по умолчанию по методу)
- Стратегии задержки: константа, callback, exponential backoff с jitter
- Retry-After header parsing
"""

import asyncio
import inspect
import logging
import random
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, FrozenSet, Optional, Union

from .context import FetchContext
from .exceptions import AbortError, TimeoutError
from .options import FetchOptions

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUS_CODES: FrozenSet[int] = frozenset({
    408,  # Request Timeout
    409,  # Conflict
    425,  # Too Early
    429,  # Too Many Requests
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
})

# Ответы без тела
NULL_BODY_STATUSES: FrozenSet[int] = frozenset({101, 204, 205, 304})

PAYLOAD_METHODS: FrozenSet[str] = frozenset({"PATCH", "POST", "PUT", "DELETE"})


# ==================== Стратегии задержки ====================

class RetryDelay:
    """
    Стратегия задержки перед повтором.

    ``compute`` получает контекст последней попытки и возвращает миллисекунды.
    """

    def compute(self, context: FetchContext) -> Any:
        raise NotImplementedError


class ConstantDelay(RetryDelay):
    """Фиксированная задержка (мс)."""

    def __init__(self, delay: float = 0):
        self.delay = delay

    def compute(self, context: FetchContext) -> float:
        return self.delay

    def __repr__(self) -> str:
        return f"ConstantDelay({self.delay})"


class CallbackDelay(RetryDelay):
    """
    Задержка из callback ``(context) -> ms``.

    Callback может быть async.
    """

    def __init__(self, callback: Callable[[FetchContext], Any]):
        self.callback = callback

    def compute(self, context: FetchContext) -> Any:
        return self.callback(context)


class ExponentialBackoff(RetryDelay):
    """
    Exponential backoff с jitter и поддержкой Retry-After.

    Args:
        base: Задержка первой попытки (мс)
        factor: Множитель на каждую следующую попытку
        max_delay: Максимальная задержка (мс)
        jitter: Добавлять случайность (50-150% от задержки)
        respect_retry_after: Использовать Retry-After из ответа
        retry_after_max: Максимум для Retry-After (мс)

    Examples:
        >>> backoff = ExponentialBackoff(base=100, factor=2, max_delay=2000, jitter=False)
        >>> # attempt 1 -> 100ms, attempt 2 -> 200ms, attempt 3 -> 400ms
        >>> await fetch("/flaky", retry=3, retry_delay=backoff)
    """

    def __init__(
        self,
        base: float = 500,
        factor: float = 2.0,
        max_delay: float = 30_000,
        jitter: bool = True,
        respect_retry_after: bool = True,
        retry_after_max: float = 120_000,
    ):
        self.base = base
        self.factor = factor
        self.max_delay = max_delay
        self.jitter = jitter
        self.respect_retry_after = respect_retry_after
        self.retry_after_max = retry_after_max

    def compute(self, context: FetchContext) -> float:
        # Приоритет 1: Retry-After header
        if self.respect_retry_after and context.response is not None:
            retry_after = self._parse_retry_after(context.response)
            if retry_after is not None:
                return min(retry_after * 1000, self.retry_after_max)

        # Приоритет 2: Exponential backoff
        wait = self.base * (self.factor ** (context.attempt - 1))
        wait = min(wait, self.max_delay)

        if self.jitter:
            wait = wait * (0.5 + random.random())

        return wait

    def _parse_retry_after(self, response) -> Optional[float]:
        """
        Распарсить Retry-After header.

        Returns:
            Секунды или None

        Security:
            - Ограничивает длину header
            - Безопасно обрабатывает malformed input
        """
        retry_after = response.headers.get("Retry-After")
        if not retry_after:
            return None

        # Нормальные значения: "60" или "Wed, 21 Oct 2015 07:28:00 GMT"
        MAX_HEADER_LENGTH = 100
        if len(retry_after) > MAX_HEADER_LENGTH:
            logger.warning(
                f"Retry-After header too long ({len(retry_after)} chars), ignoring. "
                f"Value: {retry_after[:50]}..."
            )
            return None

        try:
            seconds = float(retry_after)
            if seconds < 0 or seconds > 86400 * 365:
                logger.warning(
                    f"Retry-After seconds value out of reasonable range: {seconds}"
                )
                return None
            return seconds
        except ValueError:
            try:
                retry_date = parsedate_to_datetime(retry_after)
                delta = (retry_date - datetime.now(timezone.utc)).total_seconds()
                return max(0, delta)
            except (ValueError, TypeError, OverflowError) as e:
                logger.debug(
                    f"Failed to parse Retry-After header '{retry_after}': {e}"
                )
                return None


def as_delay_strategy(value: Union[None, float, Callable, RetryDelay]) -> RetryDelay:
    """
    Привести значение опции ``retry_delay`` к стратегии.

    Examples:
        >>> as_delay_strategy(100)
        ConstantDelay(100)
        >>> as_delay_strategy(lambda ctx: ctx.attempt * 50)  # CallbackDelay
    """
    if value is None:
        return ConstantDelay(0)
    if isinstance(value, RetryDelay):
        return value
    if callable(value):
        return CallbackDelay(value)
    return ConstantDelay(value)


# ==================== Engine ====================

class RetryEngine:
    """
    Решает, нужен ли повтор, и ждёт перед ним.

    Один экземпляр на вызов: хранит оставшийся бюджет повторов.

    Examples:
        >>> engine = RetryEngine(options)
        >>> if engine.should_retry(context):
        ...     await engine.sleep(await engine.get_wait_time(context))
        ...     engine.increment()
    """

    def __init__(self, options: FetchOptions):
        """
        Args:
            options: Эффективные опции вызова
        """
        self.options = options
        self.max_retries = self._budget(options)
        self.retry_status_codes = (
            frozenset(options.retry_status_codes)
            if options.retry_status_codes is not None
            else DEFAULT_RETRY_STATUS_CODES
        )
        self.delay = as_delay_strategy(options.retry_delay)
        self._attempt = 0

    @staticmethod
    def _budget(options: FetchOptions) -> int:
        retry = options.retry
        if retry is False:
            return 0
        if retry is None or retry is True:
            return 0 if (options.method or "GET").upper() in PAYLOAD_METHODS else 1
        return max(int(retry), 0)

    @property
    def remaining(self) -> int:
        return self.max_retries - self._attempt

    def is_retryable(self, context: FetchContext) -> bool:
        """
        Подходит ли исход попытки для повтора (без учёта бюджета).

        Повторяются: статус из retry_status_codes, сетевые ошибки и таймауты.
        Отмена вызывающим кодом не повторяется никогда.
        """
        error = context.error
        if context.response is None:
            if isinstance(error, TimeoutError):
                return True
            if isinstance(error, AbortError):
                return False
            # Сетевая ошибка: повтор независимо от retry_status_codes
            return error is not None
        return context.response.status in self.retry_status_codes

    def should_retry(self, context: FetchContext) -> bool:
        """
        Решить, нужен ли повтор.

        Args:
            context: Контекст завершившейся попытки

        Returns:
            True если нужен retry
        """
        if self.remaining <= 0:
            return False
        return self.is_retryable(context)

    async def get_wait_time(self, context: FetchContext) -> float:
        """Задержка в миллисекундах (callback может быть async)."""
        value = self.delay.compute(context)
        if inspect.isawaitable(value):
            value = await value
        try:
            return max(float(value or 0), 0.0)
        except (TypeError, ValueError):
            logger.warning(f"Invalid retry delay {value!r}, retrying immediately")
            return 0.0

    @staticmethod
    async def sleep(wait_ms: float) -> None:
        await asyncio.sleep(wait_ms / 1000 if wait_ms > 0 else 0)

    def increment(self):
        """Увеличить счётчик повторов."""
        self._attempt += 1

    @property
    def attempt(self) -> int:
        """Сколько повторов уже сделано."""
        return self._attempt
