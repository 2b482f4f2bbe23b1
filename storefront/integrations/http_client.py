"""Shared aiohttp session handling for storefront REST clients."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from storefront.core.exceptions import TransportException

logger = logging.getLogger(__name__)


class BaseApiClient:
    """Lazily opened aiohttp session bound to one storefront base URL.

    A session passed in by the caller is borrowed and never closed here.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse) -> str:
        try:
            body = (await response.text()).strip()
        except (aiohttp.ClientError, UnicodeDecodeError):
            body = ""
        return body or f"HTTP error! status: {response.status}"

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        ok_statuses: tuple[int, ...] = (200,),
    ) -> tuple[int, Any]:
        """Perform one request. Returns (status, decoded body) for accepted statuses.

        Non-accepted statuses raise TransportException carrying the response text.
        """
        session = await self._get_session()
        url = self._url(path)
        try:
            async with session.request(method, url, json=json) as response:
                if response.status not in ok_statuses:
                    message = await self._error_message(response)
                    logger.warning("%s %s -> %s: %s", method, url, response.status, message)
                    raise TransportException(message, status=response.status)
                try:
                    data = await response.json(content_type=None)
                except ValueError as exc:
                    raise TransportException(
                        f"Invalid JSON in response from {path}", status=response.status
                    ) from exc
                return response.status, data
        except asyncio.TimeoutError as exc:
            logger.warning("%s %s timed out", method, url)
            raise TransportException("Request timed out") from exc
        except aiohttp.ClientError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportException(f"Network error: {exc}") from exc
