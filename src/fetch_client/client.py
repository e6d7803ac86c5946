# src/fetch_client/client.py
"""
Асинхронный fetch-клиент: пайплайн выполнения запроса.

Один вызов проходит состояния BUILD -> SEND -> CLASSIFY -> (RETRY_WAIT -> SEND)
и завершается либо ответом, либо FetchError. Попытки одного вызова строго
последовательны; опции клиента только читаются.
"""

import time
from typing import Any, Optional, Union

import httpx

from .core.cancellation import AbortSignal, run_until_aborted, timeout_signal
from .core.context import FetchContext
from .core.exceptions import AbortError, FetchClientException, FetchError, NetworkError, create_fetch_error
from .core.hooks import maybe_await, run_hooks
from .core.logging import FetchLogger, LoggingConfig, reset_correlation_id, set_correlation_id
from .core.options import FetchOptions, merge_options
from .core.response import FetchResponse, ResponseType, ResponseTypeResolver, default_resolver, parse_body
from .core.retry_engine import NULL_BODY_STATUSES, RetryEngine
from .transports.base import RawRequest, RawSend
from .transports.httpx_transport import HttpxTransport
from .utils.payload import is_json_serializable, is_payload_method, is_stream_like, serialize_body
from .utils.query import join_url, with_query

Target = Union[str, httpx.URL]


class Fetch:
    """
    Fetch-клиент с дефолтными опциями, хуками, retry и таймаутами.

    Example:
        >>> api = create_fetch({"base_url": "https://api.example.com", "retry": 2})
        >>> users = await api("/users", query={"page": 1})
        >>> response = await api.raw("/users/1", method="DELETE")
        >>> response.status
        204

        >>> # Вложенные клиенты: дефолты сливаются на каждом уровне
        >>> admin = api.create(headers={"authorization": "Bearer ..."})

    Args:
        defaults: Опции по умолчанию (FetchOptions или dict)
        send: Raw send; по умолчанию HttpxTransport
        logging: LoggingConfig или FetchLogger; None - клиент не пишет логи
        resolver: Эвристики выбора стратегии парсинга
    """

    def __init__(
        self,
        defaults: Union[None, FetchOptions, dict] = None,
        *,
        send: Optional[RawSend] = None,
        logging: Union[None, LoggingConfig, FetchLogger] = None,
        resolver: Optional[ResponseTypeResolver] = None,
        _owns_send: Optional[bool] = None,
    ):
        self.defaults = FetchOptions.from_value(defaults)
        self._owns_send = send is None if _owns_send is None else _owns_send
        self._send: RawSend = send if send is not None else HttpxTransport()
        self.resolver = resolver or default_resolver
        if isinstance(logging, LoggingConfig):
            logging = FetchLogger(logging)
        self._logger: Optional[FetchLogger] = logging

    @property
    def native(self) -> RawSend:
        """Raw send без пайплайна."""
        return self._send

    def create(
        self,
        defaults: Union[None, FetchOptions, dict] = None,
        **kwargs: Any
    ) -> "Fetch":
        """
        Производный клиент: ``merge_options(defaults, self.defaults)``.

        Транспорт и логгер общие с родителем.
        """
        more = FetchOptions.from_value(defaults, **kwargs)
        return Fetch(
            merge_options(more, self.defaults),
            send=self._send,
            logging=self._logger,
            resolver=self.resolver,
            _owns_send=False,
        )

    # ==================== Вызов ====================

    async def __call__(
        self,
        request: Target,
        options: Union[None, FetchOptions, dict] = None,
        **kwargs: Any
    ) -> Any:
        """Выполнить запрос и вернуть распарсенное тело."""
        response = await self.raw(request, options, **kwargs)
        return response.data

    async def raw(
        self,
        request: Target,
        options: Union[None, FetchOptions, dict] = None,
        **kwargs: Any
    ) -> FetchResponse:
        """
        Выполнить запрос и вернуть FetchResponse (тело в ``response.data``).

        Raises:
            FetchError: Ошибочный статус, сетевая ошибка, таймаут или отмена
        """
        call_options = FetchOptions.from_value(options, **kwargs)
        effective = merge_options(call_options, self.defaults)
        url = self._build(str(request), effective)

        context = FetchContext(request=url, options=effective)
        token = set_correlation_id(context.request_id)
        try:
            return await self._execute(context)
        finally:
            reset_correlation_id(token)

    # ==================== BUILD ====================

    @staticmethod
    def _build(request: str, options: FetchOptions) -> str:
        """Итоговый URL; метод и тело нормализуются в ``options`` (копия)."""
        options.method = (options.method or "GET").upper()
        if options.headers is None:
            options.headers = httpx.Headers()

        url = join_url(options.base_url, request)
        query = {**(options.params or {}), **(options.query or {})}
        if query:
            url = with_query(url, query, options.stringify_query, options.parse_query)

        body = options.body
        if body is not None and is_payload_method(options.method):
            if is_json_serializable(body):
                options.body = serialize_body(body)
                options.headers.setdefault("content-type", "application/json")
                options.headers.setdefault("accept", "application/json")
            elif is_stream_like(body) and options.duplex is None:
                options.duplex = "half"

        return url

    # ==================== SEND / CLASSIFY / RETRY ====================

    async def _execute(self, context: FetchContext) -> FetchResponse:
        options = context.options
        engine = RetryEngine(options)

        while True:
            started = time.perf_counter()

            await run_hooks(options.on_request, context)
            if context.error is not None:
                # Ошибка из on_request: запрос не отправляется
                raise await self._fail(context)

            if self._logger:
                self._logger.request_started(context, context.request)

            try:
                response = await self._send_once(context)
            except FetchClientException as error:
                context.error = error
                await run_hooks(options.on_request_error, context)
                if self._caller_aborted(options):
                    raise await self._fail(context)
                if engine.should_retry(context):
                    context = await self._retry_wait(engine, context)
                    continue
                raise await self._fail(context)

            context.response = response
            try:
                retry = await self._classify(engine, context)
            except BaseException:
                await self._release(response, context.response)
                raise

            if retry:
                await self._release(response, context.response)
                context = await self._retry_wait(engine, context)
                continue

            if self._logger:
                self._logger.request_completed(context, context.response, (time.perf_counter() - started) * 1000)
            return context.response

    async def _classify(self, engine: RetryEngine, context: FetchContext) -> bool:
        """Прочитать тело и прогнать хуки ответа; True - нужен повтор."""
        options = context.options
        await self._read_body(context)

        await run_hooks(options.on_response, context)
        response = context.response

        if not options.ignore_response_error and 400 <= response.status < 600:
            await run_hooks(options.on_response_error, context)
            if engine.should_retry(context):
                return True
            raise await self._fail(context)

        if context.error is not None:
            # Ошибка, выставленная хуком ответа
            raise await self._fail(context)
        return False

    @staticmethod
    async def _release(*responses: Optional[FetchResponse]) -> None:
        for response in {id(r): r for r in responses if r is not None}.values():
            await response.aclose()

    async def _send_once(self, context: FetchContext) -> FetchResponse:
        """Одна отправка под связанным сигналом (caller ∪ timeout)."""
        options = context.options
        raw = RawRequest(
            method=options.method,
            url=context.request,
            headers=options.headers,
            body=options.body,
            duplex=options.duplex,
            timeout=options.timeout,
            extra=dict(options.extra),
        )

        with timeout_signal(options.timeout) as timeout:
            upstream = [s for s in (options.signal, timeout) if s is not None]
            signal = AbortSignal.any(upstream) if upstream else None
            try:
                return await run_until_aborted(self._send(raw, signal), signal)
            finally:
                if signal is not None:
                    signal.dispose()

    def _has_body_default(self, context: FetchContext) -> bool:
        return (
            context.options.method != "HEAD"
            and context.response.status not in NULL_BODY_STATUSES
        )

    async def _read_body(self, context: FetchContext) -> None:
        default = self._has_body_default(context)
        has_body = default
        if context.options.has_body:
            async def tail():
                return default
            result = await context.options.has_body(context, tail)
            has_body = default if result is None else bool(result)

        response = context.response
        if not has_body:
            await response.aclose()
            return

        try:
            if context.options.parse_response is not None:
                response.data = await maybe_await(context.options.parse_response(context))
                if not _keeps_stream(context.options):
                    await response.aclose()
            else:
                response_type = self.resolver.resolve(
                    context.options.response_type,
                    response.headers.get("content-type"),
                )
                response.data = await parse_body(response, response_type)
        except NetworkError as error:
            context.error = error
            raise await self._fail(context)

    async def _retry_wait(self, engine: RetryEngine, context: FetchContext) -> FetchContext:
        delay = await engine.get_wait_time(context)
        if self._logger:
            self._logger.request_retry(context, delay)
        try:
            await run_until_aborted(engine.sleep(delay), context.options.signal)
        except AbortError as error:
            context.error = error
            raise await self._fail(context)
        engine.increment()
        return context.next_attempt()

    @staticmethod
    def _caller_aborted(options: FetchOptions) -> bool:
        return options.signal is not None and options.signal.aborted

    async def _fail(self, context: FetchContext) -> FetchError:
        factory = context.options.create_fetch_error or create_fetch_error
        error = await maybe_await(factory(context))
        if self._logger:
            self._logger.request_failed(context, error)
        return error

    # ==================== HTTP методы ====================

    async def get(self, request: Target, options=None, **kwargs: Any) -> Any:
        return await self(request, options, method="GET", **kwargs)

    async def post(self, request: Target, options=None, **kwargs: Any) -> Any:
        return await self(request, options, method="POST", **kwargs)

    async def put(self, request: Target, options=None, **kwargs: Any) -> Any:
        return await self(request, options, method="PUT", **kwargs)

    async def patch(self, request: Target, options=None, **kwargs: Any) -> Any:
        return await self(request, options, method="PATCH", **kwargs)

    async def delete(self, request: Target, options=None, **kwargs: Any) -> Any:
        return await self(request, options, method="DELETE", **kwargs)

    async def head(self, request: Target, options=None, **kwargs: Any) -> FetchResponse:
        return await self.raw(request, options, method="HEAD", **kwargs)

    async def options(self, request: Target, options=None, **kwargs: Any) -> Any:
        return await self(request, options, method="OPTIONS", **kwargs)

    # ==================== Ресурсы ====================

    async def close(self) -> None:
        """Закрыть транспорт, если клиент его создал."""
        close = getattr(self._send, "close", None)
        if self._owns_send and close is not None:
            await close()

    async def __aenter__(self) -> "Fetch":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _keeps_stream(options: FetchOptions) -> bool:
    return bool(options.response_type) and ResponseType(options.response_type) is ResponseType.STREAM


def create_fetch(
    defaults: Union[None, FetchOptions, dict] = None,
    *,
    send: Optional[RawSend] = None,
    logging: Union[None, LoggingConfig, FetchLogger] = None,
    resolver: Optional[ResponseTypeResolver] = None,
) -> Fetch:
    """
    Создать fetch-клиент.

    Example:
        >>> async with create_fetch({"base_url": "https://api.example.com"}) as api:
        ...     data = await api("/health")
    """
    return Fetch(defaults, send=send, logging=logging, resolver=resolver)
