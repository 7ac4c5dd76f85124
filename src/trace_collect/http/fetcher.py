"""Async HTTP client wrapper with timeout and user-agent configuration."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from trace_collect.collect.errors import HttpFetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_TRANSPORT_RETRIES = 2
DEFAULT_USER_AGENT = "trace-collect/0.1"


class HttpFetcher:
    """Shared ``httpx.AsyncClient`` used by concurrent remote fetch attempts."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": user_agent},
            transport=transport or httpx.AsyncHTTPTransport(retries=DEFAULT_TRANSPORT_RETRIES),
            follow_redirects=True,
        )

    async def fetch_text(self, url: str, params: dict[str, str] | None = None) -> str:
        """GET ``url`` and return the body, raising on a non-success status."""

        response = await self._client.get(url, params=params)
        if not response.is_success:
            logger.debug("HTTP %s fetching %s", response.status_code, response.url)
            raise HttpFetchError(
                f"error fetching {response.url}: {response.status_code} {response.reason_phrase}",
                url=str(response.url),
                status_code=response.status_code,
            )
        return response.text

    async def fetch_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        return json.loads(await self.fetch_text(url, params=params))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpFetcher:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()
