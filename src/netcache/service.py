"""The public netcache façade.

:class:`NetCache` wires a :class:`~netcache.store.LocalStore`, a
:class:`~netcache.network.ConnectivityProber`, a
:class:`~netcache.client.FetchClient` and a
:class:`~netcache.orchestrator.FetchOrchestrator` together and exposes the
operations callers need:

=============================  ==========================================
Operation                      Returns
=============================  ==========================================
``check_network_status()``     :class:`~netcache.models.NetworkStatus`
``fetch_with_fallback()``      :class:`~netcache.models.FetchResult`
``force_refresh()``            :class:`~netcache.models.FetchResult`
``save()``                     ``None``
``load()``                     :class:`~netcache.models.FetchResult` or ``None``
``clear()``                    list of removed keys
``list_cache_timestamps()``    ``dict[str, int]``
=============================  ==========================================

Network operations are coroutines; store operations touch only the local
filesystem and are synchronous. Every failure is raised as a
:class:`~netcache.exceptions.NetcacheError` subclass with a descriptive
message.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import httpx

from netcache.client import FetchClient
from netcache.config import get_store_dir
from netcache.maintenance import CacheMaintenance
from netcache.models import (
    FetchConfig,
    FetchResult,
    GlobalConfig,
    NetworkStatus,
    ProbeConfig,
)
from netcache.network import ConnectivityProber
from netcache.orchestrator import FetchOrchestrator
from netcache.store import LocalStore
from netcache.store.local_store import Clock


class NetCache:
    """Network-aware JSON cache.

    Each key names the file ``<store_dir>/<key>.json``, so keys must be
    non-empty, must not contain ``/``, ``\\`` or NUL, and must not start with
    ``.``. Any other key raises :class:`~netcache.exceptions.InvalidKeyError`
    before the filesystem or the network is touched.

    Args:
        store_dir: Directory holding one JSON file per key.
        target_url: Service whose reachability gates remote fetches. When
            ``None``, each fetch probes the origin of its own URL.
        probe: Probe endpoints and timeouts.
        fetch: Remote fetch settings.
        transport: Optional :class:`httpx.AsyncBaseTransport` shared by the
            prober and the fetch client.
        clock: Epoch-second time source.

    Example::

        cache = NetCache.from_config(resolve_config())
        result = await cache.fetch_with_fallback("habits", url, {"apikey": key})
    """

    def __init__(
        self,
        store_dir: str | Path,
        target_url: Optional[str] = None,
        probe: Optional[ProbeConfig] = None,
        fetch: Optional[FetchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._store = LocalStore(store_dir, clock=clock)
        self._prober = ConnectivityProber(target_url, probe, transport=transport)
        self._orchestrator = FetchOrchestrator(
            self._store,
            self._prober,
            FetchClient(fetch, transport=transport),
            clock=clock,
        )
        self._maintenance = CacheMaintenance(self._store)

    @classmethod
    def from_config(
        cls,
        config: GlobalConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
    ) -> NetCache:
        """Build a :class:`NetCache` from an effective :class:`GlobalConfig`."""
        return cls(
            get_store_dir(config),
            target_url=config.target_url,
            probe=config.probe,
            fetch=config.fetch,
            transport=transport,
            clock=clock,
        )

    @property
    def store(self) -> LocalStore:
        return self._store

    @property
    def maintenance(self) -> CacheMaintenance:
        return self._maintenance

    # ------------------------------------------------------------------ #
    # Network operations
    # ------------------------------------------------------------------ #

    async def check_network_status(self, target_url: Optional[str] = None) -> NetworkStatus:
        """Probe general connectivity and, when online, the target service."""
        return await self._prober.status(target_url)

    async def fetch_with_fallback(
        self,
        key: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchResult:
        """See :meth:`FetchOrchestrator.fetch_with_fallback`."""
        return await self._orchestrator.fetch_with_fallback(key, url, headers)

    async def force_refresh(
        self,
        key: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchResult:
        """See :meth:`FetchOrchestrator.force_refresh`."""
        return await self._orchestrator.force_refresh(key, url, headers)

    # ------------------------------------------------------------------ #
    # Store operations
    # ------------------------------------------------------------------ #

    def save(self, key: str, data: Any) -> None:
        self._store.save(key, data)

    def load(self, key: str) -> Optional[FetchResult]:
        return self._store.load(key)

    def clear(self, key: Optional[str] = None) -> list[str]:
        return self._maintenance.clear(key)

    def list_cache_timestamps(self) -> dict[str, int]:
        return self._maintenance.list_cache_timestamps()
