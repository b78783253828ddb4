from typing import AsyncIterator, Callable, Iterable, List

import httpx
import pytest

from carpulse.client import CarPulseClient
from fake_backend import create_fake_backend

BASE_URL = "http://testserver"


async def iter_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def sse_response(chunks: Iterable[bytes], status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        headers={"Content-Type": "text/event-stream"},
        content=iter_chunks(list(chunks)),
    )


class RecordingHandler:
    """MockTransport handler that records every request it receives."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


@pytest.fixture
def mock_client_factory():
    """Build a CarPulseClient whose transport is the given handler."""

    def factory(respond: Callable[[httpx.Request], httpx.Response]):
        handler = RecordingHandler(respond)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = CarPulseClient(http_client=http_client, base_url=BASE_URL, app_name="agent", user_id="user")
        return client, handler

    return factory


@pytest.fixture
def fake_backend():
    return create_fake_backend()


@pytest.fixture
def backend_client(fake_backend):
    def factory() -> CarPulseClient:
        http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=fake_backend))
        return CarPulseClient(http_client=http_client, base_url=BASE_URL, app_name="agent", user_id="user")

    return factory


@pytest.fixture
def sse():
    return sse_response
