"""
Environment Configuration Examples.

Demonstrates building a client from a .env file with logging enabled.
"""

import asyncio

from fetch_client import create_fetch_from_env, load_from_env


ENV = """\
FETCH_CLIENT_BASE_URL=https://httpbin.org
FETCH_CLIENT_TIMEOUT=5000
FETCH_CLIENT_RETRY=2
FETCH_CLIENT_HEADERS={"x-api-key": "demo-secret"}
FETCH_CLIENT_LOG_ENABLED=true
FETCH_CLIENT_LOG_LEVEL=DEBUG
FETCH_CLIENT_LOG_FORMAT=colored
"""


async def main():
    with open(".env.demo", "w") as f:
        f.write(ENV)

    options, logging_config = load_from_env(profile="demo")
    print(f"base_url={options.base_url} timeout={options.timeout}ms retry={options.retry}")
    print(f"logging: {logging_config.level.value} / {logging_config.format.value}")

    # Заголовок x-api-key в логах будет замаскирован
    async with create_fetch_from_env(profile="demo", log_headers=True) as api:
        print(await api("/headers"))


if __name__ == "__main__":
    asyncio.run(main())
