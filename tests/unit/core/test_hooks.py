"""Тесты HookChain и run_hooks."""

import asyncio

import pytest

from fetch_client.core.context import FetchContext
from fetch_client.core.hooks import HookChain, run_hooks
from fetch_client.core.options import FetchOptions


@pytest.fixture
def context():
    return FetchContext(request="https://api.example.com/users", options=FetchOptions())


class TestHookChain:
    """Composition and normalization."""

    def test_of_none_is_empty(self):
        chain = HookChain.of(None)
        assert not chain
        assert len(chain) == 0

    def test_of_callable(self):
        def hook(ctx, next):
            pass

        assert HookChain.of(hook).stages == (hook,)

    def test_of_chain_is_identity(self):
        chain = HookChain([lambda ctx, next: None])
        assert HookChain.of(chain) is chain

    def test_wrap_puts_outer_first(self):
        def outer(ctx, next):
            pass

        def inner(ctx, next):
            pass

        assert HookChain([outer]).wrap(HookChain([inner])).stages == (outer, inner)


class TestRunHooks:
    """Execution semantics."""

    @pytest.mark.asyncio
    async def test_empty_chain_returns_none(self, context):
        assert await run_hooks(HookChain(), context) is None
        assert await run_hooks(None, context) is None

    @pytest.mark.asyncio
    async def test_onion_order(self, context):
        order = []

        async def outer(ctx, next):
            order.append("outer:in")
            await next()
            order.append("outer:out")

        async def inner(ctx, next):
            order.append("inner")
            await next()

        await run_hooks(HookChain([outer, inner]), context)
        assert order == ["outer:in", "inner", "outer:out"]

    @pytest.mark.asyncio
    async def test_sync_hook_calling_next_without_await_is_settled(self, context):
        order = []

        def outer(ctx, next):
            order.append("outer")
            next()

        async def inner(ctx, next):
            await asyncio.sleep(0)
            order.append("inner")

        await run_hooks(HookChain([outer, inner]), context)
        assert order == ["outer", "inner"]

    @pytest.mark.asyncio
    async def test_next_runs_rest_only_once(self, context):
        counter = {"inner": 0}

        async def outer(ctx, next):
            await next()
            await next()

        def inner(ctx, next):
            counter["inner"] += 1

        await run_hooks(HookChain([outer, inner]), context)
        assert counter["inner"] == 1

    @pytest.mark.asyncio
    async def test_hook_can_set_error_and_replace_response(self, context):
        marker = object()

        def hook(ctx, next):
            ctx.error = ValueError("custom error")
            ctx.response = marker

        await run_hooks(HookChain([hook]), context)
        assert str(context.error) == "custom error"
        assert context.response is marker

    @pytest.mark.asyncio
    async def test_exceptions_propagate(self, context):
        async def hook(ctx, next):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await run_hooks(HookChain([hook]), context)

    @pytest.mark.asyncio
    async def test_result_of_outermost_stage_is_returned(self, context):
        async def outer(ctx, next):
            inner_result = await next()
            return not inner_result

        def inner(ctx, next):
            return True

        assert await run_hooks(HookChain([outer, inner]), context) is False

    @pytest.mark.asyncio
    async def test_custom_tail(self, context):
        async def tail():
            return "default"

        async def hook(ctx, next):
            return await next()

        assert await HookChain([hook])(context, tail) == "default"
