"""Connectivity probing for netcache.

Exposes :class:`ConnectivityProber`, which reports general internet access
and target-service reachability as plain booleans.
"""

from netcache.network.prober import ConnectivityProber

__all__ = ["ConnectivityProber"]
