"""Best-effort connectivity probing.

:class:`ConnectivityProber` answers two questions with short-timeout GET
requests:

* *Is there any internet access?* -- each of
  :attr:`~netcache.models.ProbeConfig.endpoints` is tried in order until one
  answers.
* *Can the target service be reached?* -- one GET against the target URL.

A probe succeeds when the request completes, whatever the HTTP status. A
``503`` from the target still proves the host is reachable; it is the fetch
path, not the prober, that insists on a 2xx.

Probes never raise. Each probe is bounded end to end by its timeout.
Timeouts, refused connections, DNS failures and invalid URLs all turn into
``False``. Nothing is cached between calls, so every
:meth:`ConnectivityProber.status` reflects the network as it is right now.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from netcache.exceptions import ConfigError
from netcache.models import NetworkStatus, ProbeConfig
from netcache.output import debug, warning


class ConnectivityProber:
    """Stateless reachability checks over an optionally injected transport.

    Args:
        target_url: The service endpoint probed by
            :meth:`is_target_reachable`. May be ``None`` when every caller
            passes an explicit target.
        config: Probe endpoints and timeouts.
        transport: Optional :class:`httpx.AsyncBaseTransport`. Tests pass an
            :class:`httpx.MockTransport` here to script network behaviour.

    Example::

        prober = ConnectivityProber("https://api.example.com")
        status = await prober.status()
        if status.can_reach_target:
            ...
    """

    def __init__(
        self,
        target_url: Optional[str] = None,
        config: Optional[ProbeConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._target_url = target_url
        self._config = config or ProbeConfig()
        self._transport = transport

    @property
    def target_url(self) -> Optional[str]:
        """The configured target, or ``None``."""
        return self._target_url

    async def is_internet_reachable(self) -> bool:
        """Return ``True`` as soon as one probe endpoint answers.

        Endpoints are tried in configuration order; later endpoints are not
        contacted once one succeeds.
        """
        for url in self._config.endpoints:
            if await self._probe(url, self._config.internet_timeout):
                return True
        return False

    async def is_target_reachable(self, target_url: Optional[str] = None) -> bool:
        """Return ``True`` if a GET against the target completes.

        Args:
            target_url: Overrides the configured target for this call.

        Raises:
            ConfigError: If neither an override nor a configured target is
                available.
        """
        target = target_url or self._target_url
        if not target:
            raise ConfigError(
                "No target URL configured. Set target_url or pass --target."
            )
        return await self._probe(target, self._config.target_timeout)

    async def status(self, target_url: Optional[str] = None) -> NetworkStatus:
        """Compute a fresh :class:`~netcache.models.NetworkStatus`.

        The target is only probed when general connectivity was detected;
        offline, ``can_reach_target`` is ``False`` without spending the
        target timeout. With no target known, ``can_reach_target`` is
        ``False`` and a warning is emitted; ``status()`` itself never raises.
        """
        is_online = await self.is_internet_reachable()
        can_reach_target = False
        target = target_url or self._target_url
        if is_online and target:
            can_reach_target = await self.is_target_reachable(target)
        elif is_online:
            warning("No target URL configured; reporting the target as unreachable")
        else:
            debug("No internet connectivity; skipping target probe")
        return NetworkStatus(is_online=is_online, can_reach_target=can_reach_target)

    async def _probe(self, url: str, timeout: float) -> bool:
        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await asyncio.wait_for(client.get(url), timeout)
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as exc:
            debug(f"Probe {url} failed: {exc!r}")
            return False
        debug(f"Probe {url} answered HTTP {response.status_code}")
        return True
