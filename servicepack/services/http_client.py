"""Minimal JSON-over-HTTP client shared by the remote services.

Wraps a single GET request with a fixed base URL, a bounded timeout and a
configurable TLS verification policy. Failures are normalized into the
service pack's error taxonomy so callers only have to handle
``TransportError`` and ``RemoteLogicalError``.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..errors import RemoteLogicalError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json"}


class JsonHttpClient:
    """GET-only JSON client bound to one remote host."""

    def __init__(self, base_url: str, timeout: float = 30.0, verify_ssl: bool = True):
        """Initialize the client.

        Args:
            base_url: Scheme, host and optional path prefix of the remote API.
            timeout: Total request timeout in seconds.
            verify_ssl: Whether TLS certificates are verified.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def build_url(self, path: str) -> str:
        """Join the base URL with a request path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> Any:
        """Issue a GET request and decode the JSON body.

        Args:
            path: Request path relative to the base URL.
            params: Query parameters.
            headers: Extra headers merged over ``Accept: application/json``.
            session: Existing HTTP session; a short-lived one is opened if omitted.

        Returns:
            Decoded JSON body.

        Raises:
            TransportError: Network failure, timeout or non-2xx status.
            RemoteLogicalError: Body is not valid JSON.
        """
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self._request(own_session, path, params, headers)
        return await self._request(session, path, params, headers)

    async def _request(
        self,
        session: aiohttp.ClientSession,
        path: str,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
    ) -> Any:
        url = self.build_url(path)
        request_headers = {**DEFAULT_HEADERS, **(headers or {})}
        query = {key: str(value) for key, value in (params or {}).items()}
        kwargs: dict[str, Any] = {
            "params": query,
            "headers": request_headers,
            "timeout": aiohttp.ClientTimeout(total=self.timeout),
        }
        if not self.verify_ssl:
            kwargs["ssl"] = False

        logger.debug(f"GET {url}")
        try:
            async with session.get(url, **kwargs) as response:
                response.raise_for_status()
                body = await response.read()
        except asyncio.TimeoutError as e:
            logger.error(f"Request to {url} timed out after {self.timeout}s")
            raise TransportError(f"Request timed out after {self.timeout}s") from e
        except aiohttp.ClientResponseError as e:
            logger.error(f"Request to {url} failed: {e.status} - {e.message}")
            raise TransportError(f"HTTP {e.status}: {e.message}") from e
        except aiohttp.ClientError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(str(e) or e.__class__.__name__) from e

        try:
            return json.loads(body.decode(response.charset or "utf-8"))
        except (LookupError, ValueError) as e:
            logger.warning(f"Undecodable JSON from {url}: {e}")
            raise RemoteLogicalError("Response body is not valid JSON") from e
