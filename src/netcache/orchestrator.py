"""Fallback and forced-refresh policies over the prober, fetch client, and store.

:class:`FetchOrchestrator` runs each request through a short state machine:

1. **Probe** -- ask :class:`~netcache.network.ConnectivityProber` for a fresh
   :class:`~netcache.models.NetworkStatus`.
2. **Remote fetch** -- only when the target is reachable.
3. **Persist and return** -- a successful fetch is saved, then returned as
   ``online``. A failed save is reported and otherwise ignored.
4. **Fallback load** -- after an unreachable target or any fetch error, the
   cached entry for the same key is returned as ``local``.

:meth:`FetchOrchestrator.force_refresh` is the strict variant: it never
falls back, and both the fetch and the save must succeed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urlsplit

from netcache.client import FetchClient
from netcache.exceptions import (
    ConnectivityRequiredError,
    FetchError,
    NoDataAvailableError,
    StoreError,
)
from netcache.models import FetchResult, Provenance
from netcache.network import ConnectivityProber
from netcache.output import debug, warning
from netcache.store import LocalStore
from netcache.store.local_store import Clock, epoch_seconds


class FetchOrchestrator:
    """Decide between live data and cached data for one key at a time.

    Holds no per-request state, so one instance may serve concurrent
    requests for different keys.

    Args:
        store: Where fetched data is persisted and fallbacks are read.
        prober: Reachability checks run before every request.
        fetch_client: Performs the remote GET.
        clock: Epoch-second source used to stamp ``online`` results.
    """

    def __init__(
        self,
        store: LocalStore,
        prober: ConnectivityProber,
        fetch_client: FetchClient,
        clock: Optional[Clock] = None,
    ) -> None:
        self._store = store
        self._prober = prober
        self._fetch_client = fetch_client
        self._clock = clock or epoch_seconds

    async def fetch_with_fallback(
        self,
        key: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchResult:
        """Return fresh data when possible, otherwise the cached copy.

        Args:
            key: Cache key the data is stored under.
            url: Remote URL returning JSON.
            headers: Extra request headers.

        Returns:
            An ``online`` result stamped with the current time, or a
            ``local`` result carrying the stored capture time.

        Raises:
            NoDataAvailableError: Nothing could be fetched and nothing is
                cached for *key*.
            StoreError: The fallback read itself failed, or *key* is not a
                usable cache key.
        """
        self._store.path_for(key)  # raises InvalidKeyError before any network traffic
        status = await self._prober.status(self._target_for(url))

        if status.can_reach_target:
            try:
                data = await self._fetch_client.get_json(url, headers)
            except FetchError as exc:
                warning(f"Failed to fetch online data for '{key}': {exc}")
            else:
                try:
                    self._store.save(key, data)
                except StoreError as exc:
                    warning(f"Failed to save data locally for '{key}': {exc}")
                return self._online(data)
        else:
            debug(f"Target unreachable (online={status.is_online}); using cache for '{key}'")

        cached = self._store.load(key)
        if cached is None:
            raise NoDataAvailableError(f"No data available online or locally for '{key}'")
        return cached

    async def force_refresh(
        self,
        key: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchResult:
        """Fetch and persist fresh data, failing rather than falling back.

        The existing cache entry is left untouched unless the new data is
        fetched successfully.

        Raises:
            ConnectivityRequiredError: The target is unreachable.
            FetchError: The remote fetch failed.
            StoreError: The fresh data could not be persisted.
        """
        self._store.path_for(key)
        status = await self._prober.status(self._target_for(url))
        if not status.can_reach_target:
            raise ConnectivityRequiredError(
                "Cannot reach the target service. Please check your internet connection."
            )

        data = await self._fetch_client.get_json(url, headers)
        self._store.save(key, data)
        return self._online(data)

    def _target_for(self, url: str) -> str:
        """The configured probe target, or the origin of *url*."""
        if self._prober.target_url:
            return self._prober.target_url
        parts = urlsplit(url)
        if parts.scheme and parts.netloc:
            return f"{parts.scheme}://{parts.netloc}"
        return url

    def _online(self, data: Any) -> FetchResult:
        return FetchResult(data=data, provenance=Provenance.ONLINE, timestamp=self._clock())
