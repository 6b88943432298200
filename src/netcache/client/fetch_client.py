"""Asynchronous remote fetch with typed error mapping.

This module provides :class:`FetchClient`, the single remote call used by
:class:`~netcache.orchestrator.FetchOrchestrator`. One call to
:meth:`FetchClient.get_json` opens an :class:`httpx.AsyncClient`, performs
exactly one GET, and closes the client again. There is no retry: a failed
attempt is final for that call. The configured timeout bounds the whole
request, body included, not just each socket operation.

Failures are reported as:

* :class:`~netcache.exceptions.TransportError` -- timeout, DNS failure,
  refused connection, malformed URL.
* :class:`~netcache.exceptions.HttpStatusError` -- any status outside 2xx.
* :class:`~netcache.exceptions.ResponseDecodeError` -- a 2xx body that is
  not valid JSON.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from netcache.exceptions import HttpStatusError, ResponseDecodeError, TransportError
from netcache.models import FetchConfig
from netcache.output import debug


class FetchClient:
    """One-shot JSON GET requests.

    Args:
        config: Timeout, SSL verification, and redirect settings.
        transport: Optional :class:`httpx.AsyncBaseTransport`, substituted
            by tests with :class:`httpx.MockTransport`.

    Example::

        client = FetchClient(FetchConfig(timeout=10))
        data = await client.get_json(
            "https://api.example.com/habits",
            headers={"Authorization": "Bearer tok"},
        )
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._transport = transport

    async def get_json(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """GET *url* and return its decoded JSON body.

        Args:
            url: Absolute URL to fetch.
            headers: Extra request headers, sent as given.

        Returns:
            The decoded JSON value (``dict``, ``list``, scalar, or ``None``).

        Raises:
            TransportError: On network, timeout, or URL errors.
            HttpStatusError: On a non-2xx response.
            ResponseDecodeError: When the body is not valid JSON.
        """
        request_headers = dict(headers or {})
        debug(f"GET {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout,
                verify=self._config.verify_ssl,
                follow_redirects=self._config.follow_redirects,
                transport=self._transport,
            ) as client:
                response = await asyncio.wait_for(
                    client.get(url, headers=request_headers),
                    self._config.timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise TransportError(
                f"Request to {url} timed out after {self._config.timeout:g}s"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Network request to {url} failed: {exc}") from exc

        self._raise_for_status(response)

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResponseDecodeError(
                f"Failed to parse JSON response from {url}: {exc}"
            ) from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise :class:`HttpStatusError` for any status outside 2xx."""
        status = response.status_code
        if 200 <= status < 300:
            return
        reason = response.reason_phrase or "Unknown"
        raise HttpStatusError(f"HTTP {status} {reason}", status_code=status)
