"""JSON-over-HTTP transport for the Raksha Sahayak REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyraksha._constants import USER_AGENT
from pyraksha._redact import redact_for_log
from pyraksha.config import RakshaConfig
from pyraksha.exceptions import RakshaApiError, RakshaTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    The replay engine and the endpoint helpers only depend on this method,
    so tests pass a fake backend instead of the aiohttp implementation.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        ...


def _error_message(text: str) -> str | None:
    """Extract ``message`` from a ``{"message": ...}`` error body."""
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


class HttpTransport:
    """aiohttp transport that sends and decodes JSON bodies."""

    def __init__(self, config: RakshaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send *payload* as JSON to ``api_base_url + endpoint`` and decode the reply.

        Network failures, timeouts, 5xx replies and undecodable bodies raise
        :class:`RakshaTransportError`.  4xx replies raise
        :class:`RakshaApiError` carrying the backend's ``message``.
        Empty bodies decode to ``None``.
        """
        url = f"{self._config.api_base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("%s %s", method, url)
        if self._config.api_trace_enabled:
            _logger.debug("Request body %s %s: %s", method, endpoint, redact_for_log(payload))

        try:
            async with self._http.request(
                method,
                url,
                json=dict(payload) if payload is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise RakshaTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise RakshaTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc

        if 400 <= status < 500:
            message = _error_message(text) or f"HTTP {status}"
            raise RakshaApiError(
                f"{method} {endpoint} rejected: {message}",
                code=str(status),
                endpoint=endpoint,
            )
        if status >= 300:
            raise RakshaTransportError(
                f"HTTP {status} from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            )

        if not text.strip():
            return None

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RakshaTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Response %s %s: %s", method, endpoint, redact_for_log(result))
        return result
