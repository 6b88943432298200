"""HTTP client module for netcache.

Provides :class:`FetchClient`, a thin wrapper over
:class:`httpx.AsyncClient` that performs one GET, insists on a 2xx status,
decodes the JSON body, and maps every failure to a
:class:`~netcache.exceptions.FetchError` subclass.
"""

from netcache.client.fetch_client import FetchClient

__all__ = ["FetchClient"]
