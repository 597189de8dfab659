from typing import AsyncGenerator, List, Tuple

import pytest
import pytest_asyncio
from sharpapi_server import SharpApiServer
from sharpapi_client.models import ClientConfig, PollingPolicy
from sharpapi_client.sharpapi_client import SharpApiClient

BASE_URL_TEMPLATE = "http://localhost:{}"


class RecordingSleep:
    """Stands in for asyncio.sleep, remembering each requested delay"""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest_asyncio.fixture
async def server(unused_tcp_port_factory) -> AsyncGenerator[Tuple[SharpApiServer, int], None]:
    """Start and yield a fake SharpAPI server on a random port."""
    port = unused_tcp_port_factory()
    server_instance = SharpApiServer(completion_time=60.0, error_rate=0.0)
    await server_instance.start(port=port)
    try:
        yield server_instance, port
    finally:
        await server_instance.stop()


@pytest.fixture
def base_url(server) -> str:
    _, port = server
    return BASE_URL_TEMPLATE.format(port)


@pytest.fixture
def policy() -> PollingPolicy:
    return PollingPolicy(base_interval_seconds=3.0, max_wait_seconds=60.0, use_server_hint=True)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def config(base_url, policy) -> ClientConfig:
    return ClientConfig(
        api_key="test_api_key",
        base_url=base_url,
        user_agent="SharpAPIPythonClient/test",
        polling=policy,
        request_timeout=5.0,
    )


@pytest.fixture
def client(config, sleep) -> SharpApiClient:
    return SharpApiClient(config=config, sleep=sleep)


def status_requests(server_instance: SharpApiServer) -> list:
    return [r for r in server_instance.requests if r["path"].startswith("/job/status/")]
