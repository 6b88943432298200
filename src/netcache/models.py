"""Canonical Pydantic models shared across all netcache modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ProbeConfig`, :class:`FetchConfig`, :class:`StoreConfig`,
    :class:`OutputConfig`, and :class:`GlobalConfig`.

**Runtime models** -- produced by the prober, the store, and the
orchestrator:
    :class:`Provenance`, :class:`NetworkStatus`, :class:`CacheEntry`, and
    :class:`FetchResult`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_PROBE_ENDPOINTS = [
    "https://www.google.com",
    "https://1.1.1.1",
    "https://8.8.8.8",
]
"""Well-known, highly available endpoints used to detect general connectivity."""


# --- Configuration ---


class ProbeConfig(BaseModel):
    """Connectivity probe settings.

    ``endpoints`` are tried in order and probing stops at the first one that
    answers. The target timeout applies to the single probe against the
    configured service endpoint.
    """

    endpoints: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PROBE_ENDPOINTS),
        description="Endpoints probed in order to detect internet access",
    )
    internet_timeout: float = Field(
        default=3.0, gt=0, description="Per-endpoint internet probe timeout in seconds"
    )
    target_timeout: float = Field(
        default=5.0, gt=0, description="Target service probe timeout in seconds"
    )


class FetchConfig(BaseModel):
    """Settings applied to every remote data fetch."""

    timeout: float = Field(default=10.0, gt=0, description="Fetch timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")


class StoreConfig(BaseModel):
    """Location of the on-disk cache."""

    directory: Optional[str] = Field(
        default=None,
        description="Cache directory (defaults to <data_dir>/entries)",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/netcache/config.json``.

    Loaded and saved by :func:`~netcache.config.load_global_config` and
    :func:`~netcache.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~netcache.config.resolve_config`
    for the full precedence chain.

    ``target_url`` names the service whose reachability gates remote
    fetches. When it is unset, each fetch probes the origin of the URL it
    is about to request.
    """

    target_url: Optional[str] = None
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Runtime ---


class Provenance(str, enum.Enum):
    """Where the data in a :class:`FetchResult` came from."""

    ONLINE = "online"
    LOCAL = "local"


class NetworkStatus(BaseModel):
    """Outcome of one connectivity check. Recomputed on every call, never cached."""

    is_online: bool
    can_reach_target: bool


class CacheEntry(BaseModel):
    """One persisted cache entry.

    On disk the capture time lives under the ``timestamp`` key::

        {
          "data": {"habits": []},
          "timestamp": 1760870400
        }

    Parsing is tolerant of schema drift: a missing ``data`` field loads as
    ``None`` and a missing, non-integer, or negative ``timestamp`` loads as
    ``0``. Anything that is not a JSON object fails validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    data: Any = None
    captured_at: int = Field(default=0, alias="timestamp")

    @field_validator("captured_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return 0
        return value

    def to_file_payload(self) -> dict[str, Any]:
        """Return the ``{"data": ..., "timestamp": ...}`` dict written to disk."""
        return {"data": self.data, "timestamp": self.captured_at}


class FetchResult(BaseModel):
    """Data handed back to a caller, tagged with its provenance.

    ``timestamp`` is the fetch time for online results and the stored
    capture time for local ones.
    """

    data: Any = None
    provenance: Provenance
    timestamp: int
