"""
Basic fetch Usage Examples

Demonstrates GET with query, POST with a JSON body, error handling and
the raw response.
"""

import asyncio

from fetch_client import FetchError, create_fetch


async def basic_get_request(api):
    """GET with query parameters."""
    print("\n=== Basic GET Request ===")

    posts = await api("/posts", query={"userId": 1})
    print(f"Posts of user 1: {len(posts)}")


async def post_with_json(api):
    """POST: dict body is sent as JSON."""
    print("\n=== POST with JSON ===")

    created = await api.post("/posts", body={"title": "My Post", "body": "content", "userId": 1})
    print(f"Created: {created}")


async def raw_response(api):
    """Status and headers via fetch.raw()."""
    print("\n=== Raw response ===")

    response = await api.raw("/posts/1")
    print(f"Status: {response.status} {response.status_text}")
    print(f"Content-Type: {response.headers.get('content-type')}")
    print(f"Title: {response.data['title']}")


async def error_handling(api):
    """4xx/5xx become FetchError with the parsed body attached."""
    print("\n=== Error handling ===")

    try:
        await api("/posts/does-not-exist", retry=0)
    except FetchError as e:
        print(f"Error: {e}")
        print(f"Kind: {e.kind}, status: {e.status}, body: {e.data}")

    # Или вернуть ответ как есть
    data = await api("/posts/does-not-exist", ignore_response_error=True)
    print(f"Ignored error, body: {data}")


async def main():
    async with create_fetch({"base_url": "https://jsonplaceholder.typicode.com"}) as api:
        await basic_get_request(api)
        await post_with_json(api)
        await raw_response(api)
        await error_handling(api)


if __name__ == "__main__":
    asyncio.run(main())
