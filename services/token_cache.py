"""OAuth2 client-credentials token cache.

Holds one bearer token and refreshes it lazily. Refreshes are single-flight:
callers that find the cache empty while an exchange is running await that
same exchange and share its token or its AuthError.
"""

import asyncio
import time
from typing import Callable, Optional

import httpx

from config import TOKEN_PATH, TOKEN_SAFETY_MARGIN
from models import CachedToken, TokenResponse
from utils.errors import AuthError
from utils.logging_ import logger


class TokenCache:
    """Lazily refreshed bearer token for one set of client credentials."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        token_path: str = TOKEN_PATH,
        safety_margin: int = TOKEN_SAFETY_MARGIN,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_path = token_path
        self._safety_margin = safety_margin
        self._clock = clock
        self._token: Optional[CachedToken] = None
        self._inflight: Optional["asyncio.Task[CachedToken]"] = None

    @property
    def cached(self) -> Optional[CachedToken]:
        return self._token

    def _fresh(self) -> Optional[str]:
        token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token.value
        return None

    async def get_access_token(self) -> str:
        value = self._fresh()
        if value is not None:
            return value

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._refresh())
        # Cancelling one waiter leaves the shared exchange running
        token = await asyncio.shield(self._inflight)
        return token.value

    def invalidate(self):
        self._token = None

    async def _refresh(self) -> CachedToken:
        try:
            self._token = await self._exchange()
            return self._token
        finally:
            self._inflight = None

    async def _exchange(self) -> CachedToken:
        logger.info("Requesting 42 API access token (client_credentials)")
        try:
            resp = await self._http.post(
                self._token_path,
                json={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
            )
        except httpx.HTTPError as e:
            raise AuthError(f"42 API oauth failure: {e}") from e

        if not resp.is_success:
            raise AuthError(
                f"42 API oauth failure: {resp.status_code} {resp.text}",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            payload = TokenResponse.model_validate(resp.json())
        except ValueError as e:
            raise AuthError(
                f"42 API oauth failure: malformed token response: {resp.text[:300]}",
                status=resp.status_code,
                body=resp.text,
            ) from e

        expires_at = self._clock() + payload.expires_in - self._safety_margin
        logger.info(f"Access token acquired (expires_in={payload.expires_in}s)")
        return CachedToken(value=payload.access_token, expires_at=expires_at)
