"""
Hooks, retry and cancellation.

Demonstrates an auth hook on a derived client, exponential backoff,
per-attempt timeouts and cancelling a call from the outside.
"""

import asyncio
import time

from fetch_client import AbortController, ExponentialBackoff, FetchError, create_fetch


def add_auth(context, next):
    context.options.headers["authorization"] = "Bearer demo-token"


async def timing(context, next):
    started = time.perf_counter()
    await next()
    print(f"  attempt {context.attempt}: {context.response.status} in {(time.perf_counter() - started) * 1000:.0f}ms")


async def hooks_example(api):
    print("\n=== Hooks ===")

    authed = api.create(on_request=add_auth)
    data = await authed("/bearer", on_response=timing)
    print(f"Authenticated: {data}")


async def retry_example(api):
    print("\n=== Retry with backoff ===")

    try:
        await api(
            "/status/503",
            retry=3,
            retry_delay=ExponentialBackoff(base=200, max_delay=2000),
            on_response=timing,
        )
    except FetchError as e:
        print(f"Gave up: {e}")


async def timeout_example(api):
    print("\n=== Timeout ===")

    try:
        await api("/delay/3", timeout=1000, retry=0)
    except FetchError as e:
        print(f"Kind: {e.kind}")


async def abort_example(api):
    print("\n=== Abort ===")

    controller = AbortController()
    asyncio.get_running_loop().call_later(0.5, controller.abort)
    try:
        await api("/delay/3", signal=controller.signal, retry=3)
    except FetchError as e:
        print(f"Kind: {e.kind}")


async def main():
    async with create_fetch({"base_url": "https://httpbin.org"}) as api:
        await hooks_example(api)
        await retry_example(api)
        await timeout_example(api)
        await abort_example(api)


if __name__ == "__main__":
    asyncio.run(main())
