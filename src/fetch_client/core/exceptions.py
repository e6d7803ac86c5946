"""
Иерархия исключений fetch-client.

Классификация:
- AbortError / TimeoutError - отмена через AbortSignal (вызывающим кодом или по таймауту)
- NetworkError - raw-send не смог получить ответ
- FetchError - итоговая ошибка запроса, которую получает вызывающий код
"""

import json
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import FetchContext

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FetchClientException(Exception):
    """Базовое исключение fetch-client."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОТМЕНА
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class AbortError(FetchClientException):
    """
    Операция отменена через AbortSignal.

    Значения name/code совпадают с DOMException, чтобы вызывающий код
    мог различать причины отмены одинаково для любого транспорта.
    """

    name = "AbortError"
    code = 20

    def __init__(self, message: str = "The operation was aborted"):
        super().__init__(message)

class TimeoutError(AbortError):
    """
    Отмена по таймауту запроса.

    Args:
        message: Сообщение об ошибке
        timeout: Значение таймаута (мс)
    """

    name = "TimeoutError"
    code = 23

    def __init__(
        self,
        message: str = "The operation was aborted due to timeout",
        timeout: Optional[float] = None
    ):
        self.timeout = timeout
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СЕТЕВЫЕ ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class NetworkError(FetchClientException):
    """Сетевая ошибка: транспорт не вернул ответ."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class ConnectionError(NetworkError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - DNS resolution failed
    """
    pass

class ConfigurationError(FetchClientException):
    """Ошибка конфигурации."""
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FETCH ERROR
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FetchError(FetchClientException):
    """
    Итоговая ошибка запроса.

    Хранит запрос, эффективные опции и ответ (если он был получен).
    Статус и тело ответа читаются из ответа, поэтому ошибка всегда
    согласована с контекстом, из которого она создана.

    Attributes:
        request: URL запроса
        options: Эффективные FetchOptions
        response: FetchResponse или None
    """

    def __init__(
        self,
        message: str,
        request: Optional[str] = None,
        options: Any = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.request = request
        self.options = options
        self.response = response

    @property
    def data(self) -> Any:
        """Распарсенное тело ответа."""
        return self.response.data if self.response is not None else None

    @property
    def status(self) -> Optional[int]:
        return self.response.status if self.response is not None else None

    @property
    def status_code(self) -> Optional[int]:
        return self.status

    @property
    def status_text(self) -> Optional[str]:
        return self.response.status_text if self.response is not None else None

    @property
    def status_message(self) -> Optional[str]:
        return self.status_text

    @property
    def kind(self) -> str:
        """
        Категория ошибки: "timeout", "abort", "network" или "response".

        Examples:
            >>> try:
            ...     await fetch("/slow", timeout=100, retry=0)
            ... except FetchError as e:
            ...     assert e.kind == "timeout"
        """
        cause = self.__cause__
        if isinstance(cause, TimeoutError):
            return "timeout"
        if isinstance(cause, AbortError):
            return "abort"
        if self.response is None:
            return "network"
        return "response"

    @property
    def is_timeout(self) -> bool:
        return self.kind == "timeout"

    @property
    def is_abort(self) -> bool:
        return self.kind == "abort"

    def __str__(self) -> str:
        return f"FetchError: {self.message}"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def create_fetch_error(context: 'FetchContext') -> FetchError:
    """
    Построить FetchError из контекста попытки.

    Формат сообщения: ``[METHOD] "<url>": <status> <statusText>``,
    затем сообщение ``context.error`` (если есть) через пробел.

    Args:
        context: Контекст последней попытки

    Returns:
        FetchError с cause = context.error

    Examples:
        >>> error = create_fetch_error(context)
        >>> str(error)
        'FetchError: [POST] "https://api.example.com/403": 403 Forbidden'
    """
    error = context.error
    error_message = ""
    if error is not None:
        error_message = getattr(error, "message", "") or str(error) or type(error).__name__

    method = (context.options.method if context.options is not None else None) or "GET"
    url = str(context.request) if context.request else "/"
    request_str = f"[{method}] {json.dumps(url, ensure_ascii=False)}"

    if context.response is not None:
        status_str = f"{context.response.status} {context.response.status_text}"
    else:
        status_str = "<no response>"

    message = f"{request_str}: {status_str}"
    if error_message:
        message += f" {error_message}"

    fetch_error = FetchError(
        message,
        request=context.request,
        options=context.options,
        response=context.response,
    )
    fetch_error.__cause__ = error
    return fetch_error


def classify_httpx_exception(exc: Exception, url: str) -> FetchClientException:
    """
    Конвертировать исключения httpx в наши исключения.

    Args:
        exc: Исключение из httpx
        url: URL запроса

    Returns:
        Наше исключение с правильной классификацией

    Examples:
        >>> exc = httpx.ReadTimeout("timed out")
        >>> our_exc = classify_httpx_exception(exc, "https://example.com")
        >>> assert isinstance(our_exc, TimeoutError)
    """
    import httpx

    if isinstance(exc, httpx.TimeoutException):
        return TimeoutError(f"Transport timeout: {exc}")

    elif isinstance(exc, (httpx.ConnectError, httpx.ProxyError)):
        return ConnectionError(str(exc) or "Connection error", url)

    elif isinstance(exc, httpx.TransportError):
        return NetworkError(str(exc) or type(exc).__name__, url)

    else:
        # Неизвестная ошибка - оборачиваем
        return NetworkError(str(exc) or type(exc).__name__, url)


def classify_requests_exception(exc: Exception, url: str) -> FetchClientException:
    """
    Конвертировать requests.exceptions в наши исключения.

    Args:
        exc: Исключение из requests
        url: URL запроса

    Returns:
        Наше исключение с правильной классификацией
    """
    import requests

    if isinstance(exc, requests.exceptions.Timeout):
        return TimeoutError(f"Transport timeout: {exc}")

    elif isinstance(exc, requests.exceptions.ConnectionError):
        return ConnectionError(str(exc) or "Connection error", url)

    else:
        return NetworkError(str(exc) or type(exc).__name__, url)
