"""On-disk cache storage for netcache.

This package provides :class:`LocalStore`, which keeps one pretty-printed
JSON file per cache key under a single directory, stamped with the time the
value was captured.
"""

from netcache.store.local_store import LocalStore, epoch_seconds

__all__ = ["LocalStore", "epoch_seconds"]
