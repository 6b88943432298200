"""One-file-per-key JSON persistence for fetched data.

Each cache key maps to ``<directory>/<key>.json`` holding a pretty-printed
envelope::

    {
      "data": <any JSON value>,
      "timestamp": <epoch seconds when the value was captured>
    }

Writes go through :func:`~netcache.config.atomic_write` (temp file, fsync,
``os.replace``) so a reader sees either the previous entry or the new one,
never a torn file. Concurrent writers to the same key are not coordinated;
the last rename wins.

Reads tolerate drift inside the envelope (a missing ``data`` or a bad
``timestamp``, see :class:`~netcache.models.CacheEntry`) but treat a file
that is not a JSON object as corrupt.

See Also:
    :class:`~netcache.maintenance.CacheMaintenance` -- listing and clearing.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from netcache.config import atomic_write
from netcache.exceptions import CorruptEntryError, InvalidKeyError, PayloadError, StoreIOError
from netcache.models import CacheEntry, FetchResult, Provenance
from netcache.output import debug, warning

ENTRY_SUFFIX = ".json"

Clock = Callable[[], int]


def epoch_seconds() -> int:
    """Current wall-clock time in whole epoch seconds."""
    return int(time.time())


class LocalStore:
    """Read/write cache entries under a single directory.

    The directory is created on the first :meth:`save`; reads against a
    missing directory behave as an empty cache.

    Args:
        directory: The process-owned cache directory.
        clock: Returns the current epoch second. Defaults to
            :func:`epoch_seconds`.

    Example::

        store = LocalStore("/tmp/netcache")
        store.save("habits", [{"id": 1}])
        result = store.load("habits")
        assert result.provenance is Provenance.LOCAL
    """

    def __init__(self, directory: str | Path, clock: Optional[Clock] = None) -> None:
        self._directory = Path(directory)
        self._clock = clock or epoch_seconds

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Return the entry file path for *key*.

        Raises:
            InvalidKeyError: If *key* cannot be used as a file name here.
        """
        _validate_key(key)
        return self._directory / f"{key}{ENTRY_SUFFIX}"

    # ------------------------------------------------------------------ #
    # Single-entry operations
    # ------------------------------------------------------------------ #

    def save(self, key: str, value: Any) -> None:
        """Stamp *value* with the current time and persist it under *key*.

        Raises:
            InvalidKeyError: If *key* is unusable as a file name.
            PayloadError: If *value* is not JSON-serialisable.
            StoreIOError: If the directory or file cannot be written.
        """
        path = self.path_for(key)
        entry = CacheEntry(data=value, captured_at=self._clock())
        try:
            text = json.dumps(entry.to_file_payload(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PayloadError(f"Cannot serialise data for key '{key}': {exc}") from exc

        try:
            atomic_write(path, text + "\n")
        except OSError as exc:
            raise StoreIOError(f"Failed to write cache entry {path}: {exc}") from exc
        debug(f"Saved cache entry '{key}' at {entry.captured_at}")

    def load(self, key: str) -> Optional[FetchResult]:
        """Load the entry for *key* as a ``local`` :class:`FetchResult`.

        Returns:
            ``None`` when nothing has been cached for *key*.

        Raises:
            InvalidKeyError: If *key* is unusable as a file name.
            CorruptEntryError: If the file is not a JSON object.
            StoreIOError: If the file exists but cannot be read.
        """
        path = self.path_for(key)
        if not path.is_file():
            return None
        entry = self._read_entry(path)
        return FetchResult(
            data=entry.data,
            provenance=Provenance.LOCAL,
            timestamp=entry.captured_at,
        )

    # ------------------------------------------------------------------ #
    # Whole-directory operations
    # ------------------------------------------------------------------ #

    def keys(self) -> list[str]:
        """Return every managed key, sorted."""
        return sorted(path.stem for path in self._entry_files())

    def clear(self, key: Optional[str] = None) -> list[str]:
        """Remove one entry, or every entry when *key* is ``None``.

        Removing a single missing entry is a no-op. A bulk clear is
        best-effort: a file that cannot be removed is reported as a warning
        and the remaining files are still processed.

        Returns:
            The keys whose files were removed.

        Raises:
            InvalidKeyError: If *key* is given and unusable.
            StoreIOError: If a single named entry exists but cannot be
                removed, or the directory cannot be listed.
        """
        if key is not None:
            path = self.path_for(key)
            try:
                path.unlink()
            except FileNotFoundError:
                return []
            except OSError as exc:
                raise StoreIOError(f"Failed to remove cache entry {path}: {exc}") from exc
            return [key]

        removed: list[str] = []
        for path in self._entry_files():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                warning(f"Failed to remove cache entry {path}: {exc}")
                continue
            removed.append(path.stem)
        return sorted(removed)

    def list_with_timestamps(self) -> dict[str, int]:
        """Map every readable entry's key to its capture time.

        Entries that cannot be read or parsed are skipped rather than
        failing the whole listing, and so are entries without an integer
        ``timestamp``. Unlike :meth:`load`, the listing does not coerce a
        missing or malformed capture time to ``0``.

        Raises:
            StoreIOError: If the directory exists but cannot be listed.
        """
        result: dict[str, int] = {}
        for path in self._entry_files():
            try:
                payload = self._read_payload(path)
            except (CorruptEntryError, StoreIOError) as exc:
                debug(f"Skipping unreadable cache entry {path.name}: {exc}")
                continue
            raw = payload.get("timestamp")
            if isinstance(raw, bool) or not isinstance(raw, int):
                debug(f"Skipping cache entry {path.name}: no integer timestamp")
                continue
            result[path.stem] = self._validate(path, payload).captured_at
        return result

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _entry_files(self) -> list[Path]:
        """Managed files: visible, regular ``*.json`` files in the directory."""
        if not self._directory.is_dir():
            return []
        try:
            candidates = list(self._directory.iterdir())
        except OSError as exc:
            raise StoreIOError(
                f"Failed to read cache directory {self._directory}: {exc}"
            ) from exc
        return [
            path
            for path in candidates
            if path.suffix == ENTRY_SUFFIX
            and not path.name.startswith(".")
            and path.is_file()
        ]

    def _read_entry(self, path: Path) -> CacheEntry:
        return self._validate(path, self._read_payload(path))

    def _read_payload(self, path: Path) -> dict[str, Any]:
        """Read *path* and return its top-level JSON object."""
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptEntryError(f"Failed to parse cache entry {path}: {exc}") from exc
        except OSError as exc:
            raise StoreIOError(f"Failed to read cache entry {path}: {exc}") from exc

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptEntryError(f"Failed to parse cache entry {path}: {exc}") from exc

        if not isinstance(parsed, dict):
            raise CorruptEntryError(
                f"Failed to parse cache entry {path}: expected a JSON object, "
                f"got {type(parsed).__name__}"
            )
        return parsed

    @staticmethod
    def _validate(path: Path, payload: dict[str, Any]) -> CacheEntry:
        try:
            return CacheEntry.model_validate(payload)
        except ValidationError as exc:  # pragma: no cover - every field is coerced
            raise CorruptEntryError(f"Failed to parse cache entry {path}: {exc}") from exc


def _validate_key(key: str) -> None:
    """Reject keys that would escape the directory or collide with temp files."""
    if not isinstance(key, str) or not key:
        raise InvalidKeyError("Cache key must be a non-empty string")
    if "/" in key or "\\" in key or "\x00" in key:
        raise InvalidKeyError(f"Cache key '{key}' must not contain path separators")
    if key.startswith("."):
        raise InvalidKeyError(f"Cache key '{key}' must not start with '.'")
