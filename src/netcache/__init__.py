"""netcache -- network-aware data fetching with an offline JSON cache.

Given a logical key and a remote URL, netcache decides whether to serve
freshly fetched remote data or to fall back to the last copy it cached on
disk, and persists every successful fetch for later offline use.

Typical usage::

    from netcache import NetCache

    cache = NetCache("/tmp/netcache", target_url="https://api.example.com")
    result = await cache.fetch_with_fallback("habits", "https://api.example.com/habits")
    print(result.provenance, result.data)

Modules:
    service: :class:`NetCache`, the public façade over every operation.
    orchestrator: The fallback and forced-refresh policies.
    network: Connectivity probing.
    client: Remote GET with typed error mapping.
    store: One-file-per-key JSON persistence.
    maintenance: Cache listing and clearing.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from netcache.service import NetCache  # noqa: E402

__all__ = ["NetCache", "__version__"]
