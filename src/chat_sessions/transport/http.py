"""
REST HTTP client for the chat session store.

Any status other than 200 is a failure, whatever the body says.
"""

import json
import logging
from typing import Any, Optional

import httpx

from chat_sessions.errors import MalformedResponse, TransportError, UnexpectedStatus

DEFAULT_API_URL = "http://localhost:3001/api"
USER_AGENT = "chat-sessions/0.1.0"

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json", "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _send(self, method: str, path: str, body: Optional[dict[str, Any]] = None) -> httpx.Response:
        logger.debug(f"{method} {path}")
        try:
            resp = await self._client.request(method, path, json=body)
        except httpx.TransportError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        if resp.status_code != 200:
            raise UnexpectedStatus(resp.status_code, f"HTTP {resp.status_code}: {resp.text[:200]}")
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponse(f"Response is not JSON: {resp.text[:200]}") from e

    async def get(self, path: str) -> Any:
        return self._json(await self._send("GET", path))

    async def get_bytes(self, path: str) -> bytes:
        resp = await self._send("GET", path)
        return resp.content

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return self._json(await self._send("POST", path, body))

    async def patch(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return self._json(await self._send("PATCH", path, body))

    async def delete(self, path: str) -> Any:
        return self._json(await self._send("DELETE", path))

    async def close(self) -> None:
        await self._client.aclose()
