"""Authenticated GET client for the 42 intranet API.

Every call goes through the token cache. Non-2xx answers raise UpstreamError
and are never retried; the dispatcher decides what the client sees.
"""

from typing import Any, List, Mapping, Optional

import httpx

from config import API_BASE_URL, HTTP_TIMEOUT
from services.token_cache import TokenCache
from utils.errors import UpstreamError
from utils.logging_ import logger
from utils.query import with_query


class ApiClient:
    def __init__(self, http: httpx.AsyncClient, tokens: TokenCache):
        self._http = http
        self.tokens = tokens

    async def request(self, path: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` with an optional ordered query and return the parsed JSON."""
        token = await self.tokens.get_access_token()
        url = with_query(path, query)
        logger.debug(f"GET {url}")
        try:
            resp = await self._http.get(url, headers={"Authorization": f"Bearer {token}"})
        except httpx.HTTPError as e:
            raise UpstreamError(None, str(e) or e.__class__.__name__, path=path) from e

        if not resp.is_success:
            logger.warning(f"42 API {resp.status_code} for {path}")
            raise UpstreamError(resp.status_code, resp.text, path=path)

        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(resp.status_code, f"invalid JSON body: {resp.text[:300]}", path=path) from e

    async def paginate(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        page_size: int = 100,
        max_pages: int = 10,
    ) -> List[Any]:
        """Collect ``page[number]=1..max_pages`` until an empty page comes back."""
        items: List[Any] = []
        for page in range(1, max_pages + 1):
            params = dict(query or {})
            params["page[size]"] = page_size
            params["page[number]"] = page
            batch = await self.request(path, params)
            if not batch:
                break
            items.extend(batch)
            logger.info(f"Fetched page {page} of {path}, total items: {len(items)}")
        return items

    async def aclose(self):
        await self._http.aclose()


def build_api_client(
    client_id: str,
    client_secret: str,
    base_url: str = API_BASE_URL,
    timeout: float = HTTP_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApiClient:
    """Wire one shared httpx client into a token cache and an API client."""
    http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
    tokens = TokenCache(http, client_id, client_secret)
    return ApiClient(http, tokens)
