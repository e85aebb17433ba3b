import asyncio
import json

import httpx
import pytest

from services.api_client import ApiClient
from services.dispatcher import build_dispatcher
from services.token_cache import TokenCache

BASE_URL = "https://api.intra.test"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeUpstream:
    """Stands in for the 42 API behind httpx.MockTransport."""

    def __init__(self):
        self.token_status = 200
        self.token_body = {"access_token": "tok-1", "expires_in": 7200}
        self.routes = {}
        self.requests = []

    def route(self, path, body, status=200):
        self.routes[path] = (status, body)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # Yield so concurrent callers can interleave at the I/O boundary
        await asyncio.sleep(0)
        if request.url.path == "/oauth/token":
            if isinstance(self.token_body, str):
                return httpx.Response(self.token_status, text=self.token_body)
            return httpx.Response(self.token_status, json=self.token_body)
        status, body = self.routes.get(request.url.path, (200, []))
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def token_requests(self):
        return [r for r in self.requests if r.url.path == "/oauth/token"]

    @property
    def api_requests(self):
        return [r for r in self.requests if r.url.path != "/oauth/token"]

    def last_token_payload(self):
        return json.loads(self.token_requests[-1].content)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http(upstream):
    return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(upstream))


@pytest.fixture
def tokens(http, clock):
    return TokenCache(http, "client-id", "client-secret", clock=clock)


@pytest.fixture
def api(http, tokens):
    return ApiClient(http, tokens)


@pytest.fixture
def dispatcher(api):
    return build_dispatcher(api)


def rpc(method, params=None, id=1):
    message = {"jsonrpc": "2.0", "method": method, "id": id}
    if params is not None:
        message["params"] = params
    return message
