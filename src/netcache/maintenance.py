"""Cache listing and clearing.

A thin façade over :class:`~netcache.store.LocalStore`; it adds no policy
of its own.
"""

from __future__ import annotations

from typing import Optional

from netcache.store import LocalStore


class CacheMaintenance:
    """Inspect and clear the entries held by a :class:`LocalStore`."""

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    def clear(self, key: Optional[str] = None) -> list[str]:
        """Remove one entry, or all of them. See :meth:`LocalStore.clear`."""
        return self._store.clear(key)

    def list_cache_timestamps(self) -> dict[str, int]:
        """Map each readable key to its capture time."""
        return self._store.list_with_timestamps()

    def describe(self) -> list[tuple[str, int]]:
        """``(key, captured_at)`` pairs sorted by key, for display."""
        return sorted(self.list_cache_timestamps().items())
