"""Shared fixtures: a fake bgpstuff.net API served through httpx.MockTransport."""

from typing import Any

import httpx
import pytest

from bgpstuff import BGPStuffClient, ClientConfig
from bgpstuff.ratelimit import TokenBucket


def envelope(exists: bool = True, **fields: Any) -> dict[str, Any]:
    """Build a {"Response": {...}} body using wire field names."""
    return {"Response": {"Exists": exists, **fields}}


class FakeAPI:
    """Routes request paths to canned responses and records every request."""

    def __init__(self):
        self.responses: dict[str, httpx.Response | Exception] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, body: Any = None, status: int = 200, content: bytes | None = None) -> None:
        if content is not None:
            self.responses[path] = httpx.Response(status, content=content)
        else:
            self.responses[path] = httpx.Response(status, json=body)

    def fail(self, path: str, exc: Exception) -> None:
        self.responses[path] = exc

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.get(request.url.path)
        if response is None:
            return httpx.Response(404, content=b"404 page not found")
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    """Manually advanced monotonic clock for TokenBucket tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock) -> TokenBucket:
    """Bucket on a frozen clock with enough tokens that tests never sleep."""
    return TokenBucket(rate=1.0, burst=100, clock=clock)


@pytest.fixture
def client(api, limiter):
    http = httpx.Client(transport=httpx.MockTransport(api))
    c = BGPStuffClient(config=ClientConfig(testing=True), http_client=http, limiter=limiter)
    yield c
    http.close()
