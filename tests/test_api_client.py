import asyncio

import httpx
import pytest

from services.api_client import ApiClient, build_api_client
from services.token_cache import TokenCache
from utils.errors import AuthError, UpstreamError


def test_request_sends_bearer_token(api, upstream):
    upstream.route("/v2/me", {"login": "jdoe"})
    assert asyncio.run(api.request("/v2/me")) == {"login": "jdoe"}

    request = upstream.api_requests[0]
    assert request.method == "GET"
    assert request.headers["Authorization"] == "Bearer tok-1"


def test_request_reuses_cached_token(api, upstream):
    async def calls():
        await api.request("/v2/campus")
        await api.request("/v2/campus")

    asyncio.run(calls())
    assert len(upstream.token_requests) == 1
    assert len(upstream.api_requests) == 2


def test_query_parameters_keep_bracketed_keys(api, upstream):
    asyncio.run(api.request("/v2/users", {"filter[login]": "j d", "page[size]": 5}))
    params = upstream.api_requests[0].url.params
    assert params["filter[login]"] == "j d"
    assert params["page[size]"] == "5"


def test_non_2xx_raises_upstream_error(api, upstream):
    upstream.route("/v2/balances", {"error": "Forbidden"}, status=403)

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(api.request("/v2/balances"))

    assert exc_info.value.status == 403
    assert "Forbidden" in exc_info.value.body
    assert len(upstream.api_requests) == 1


def test_auth_failure_skips_upstream_call(api, upstream):
    upstream.token_status = 401
    upstream.token_body = "unauthorized"

    with pytest.raises(AuthError):
        asyncio.run(api.request("/v2/me"))
    assert upstream.api_requests == []


TOKEN = {"access_token": "t", "expires_in": 7200}


def make_client(handler):
    http = httpx.AsyncClient(base_url="https://api.intra.test", transport=httpx.MockTransport(handler))
    return ApiClient(http, TokenCache(http, "id", "secret"))


def test_transport_error_raises_upstream_error():
    def refuse(request):
        if request.url.path == "/oauth/token":
            return httpx.Response(200, json=TOKEN)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(make_client(refuse).request("/v2/me"))
    assert exc_info.value.status is None


def test_paginate_stops_at_empty_page():
    pages = {"1": [{"id": 1}, {"id": 2}], "2": [{"id": 3}], "3": []}
    seen = []

    def handler(request):
        if request.url.path == "/oauth/token":
            return httpx.Response(200, json=TOKEN)
        seen.append(request)
        return httpx.Response(200, json=pages[request.url.params["page[number]"]])

    items = asyncio.run(make_client(handler).paginate("/v2/campus", page_size=100, max_pages=10))

    assert [item["id"] for item in items] == [1, 2, 3]
    assert [r.url.params["page[number]"] for r in seen] == ["1", "2", "3"]
    assert all(r.url.params["page[size]"] == "100" for r in seen)


def test_paginate_respects_max_pages(api, upstream):
    upstream.route("/v2/campus", [{"id": 1}])
    items = asyncio.run(api.paginate("/v2/campus", max_pages=3))
    assert len(items) == 3
    assert len(upstream.api_requests) == 3


def test_build_api_client_shares_one_http_client():
    client = build_api_client("id", "secret", base_url="https://api.intra.test", timeout=5)
    assert client.tokens._http is client._http
    assert client._http.timeout.read == 5
    asyncio.run(client.aclose())
