"""Live network fetches for the asset cache controller."""

from __future__ import annotations

import logging
from typing import Protocol

import aiohttp

from pyraksha._constants import USER_AGENT
from pyraksha.exceptions import RakshaTransportError
from pyraksha.models.assets import AssetRequest, CachedResponse

_logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Performs a live fetch.  Raises :class:`RakshaTransportError` when unreachable.

    Any HTTP status, including errors, is a response and not a failure.
    """

    async def fetch(self, request: AssetRequest) -> CachedResponse:
        ...


class AiohttpFetcher:
    """Fetch assets over an existing aiohttp session."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float = 15.0) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def fetch(self, request: AssetRequest) -> CachedResponse:
        headers = {"user-agent": USER_AGENT, **request.headers}
        _logger.debug("Fetching %s %s", request.method, request.url)
        try:
            async with self._http.request(
                request.method,
                request.url,
                headers=headers,
                timeout=self._timeout,
                allow_redirects=True,
            ) as resp:
                body = await resp.read()
                return CachedResponse(
                    url=str(resp.url),
                    status=resp.status,
                    headers={key.lower(): value for key, value in resp.headers.items()},
                    body=body,
                )
        except aiohttp.ClientError as exc:
            raise RakshaTransportError(f"Fetch of {request.url} failed: {exc}", endpoint=request.url) from exc
        except TimeoutError as exc:
            raise RakshaTransportError(f"Fetch of {request.url} timed out", endpoint=request.url) from exc
