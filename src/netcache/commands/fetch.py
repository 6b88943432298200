"""Fetch command -- get data for a key, online when possible.

By default the command follows the tolerant path: fetch remotely when the
target is reachable, otherwise (or on any fetch error) serve the cached
copy. ``--force`` switches to the strict path, which requires connectivity
and never falls back.

The data goes to stdout; provenance and capture time go to stderr so the
payload can be piped straight into other tools.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from netcache.commands.common import cache_from_context, fail, format_timestamp, parse_headers
from netcache.exceptions import NetcacheError
from netcache.models import Provenance
from netcache.output import format_response, info


def fetch_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Cache key to store the data under."),
    url: str = typer.Argument(help="URL returning JSON."),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Extra request header, 'Name: value'. Repeatable."
    ),
    force: bool = typer.Option(
        False, "--force", help="Require fresh data; fail instead of using the cache."
    ),
    full: bool = typer.Option(
        False, "--full", help="Print provenance and timestamp along with the data."
    ),
) -> None:
    """Fetch KEY from URL, falling back to the local cache when offline.

    Example::

        netcache fetch habits https://api.example.com/habits -H "apikey: abc"
        netcache fetch habits https://api.example.com/habits --force
    """
    headers = parse_headers(header)
    try:
        cache = cache_from_context(ctx)
        if force:
            result = asyncio.run(cache.force_refresh(key, url, headers))
        else:
            result = asyncio.run(cache.fetch_with_fallback(key, url, headers))
    except NetcacheError as exc:
        fail(exc)

    if result.provenance is Provenance.ONLINE:
        info(f"online: fetched at {format_timestamp(result.timestamp)}")
    else:
        info(f"local: cached at {format_timestamp(result.timestamp)}")

    if full:
        format_response(result.model_dump(mode="json"))
    else:
        format_response(result.data)
