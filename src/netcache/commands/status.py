"""Status command -- report internet and target reachability.

Runs the same probes the fetch path uses and prints the resulting
:class:`~netcache.models.NetworkStatus`. Probe failures are never errors.
With no target URL known the target is reported as unreachable, with a
warning on stderr.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from netcache.commands.common import cache_from_context, fail
from netcache.exceptions import NetcacheError
from netcache.output import format_response, info


def status_command(
    ctx: typer.Context,
    target: Optional[str] = typer.Option(
        None, "--target", "-t", help="Service URL to probe (overrides config)."
    ),
) -> None:
    """Check internet connectivity and whether the target service is reachable.

    Without a configured target (or --target), the target is reported as
    unreachable.

    Example::

        netcache status
        netcache status --target https://api.example.com --json
    """
    try:
        cache = cache_from_context(ctx)
        status = asyncio.run(cache.check_network_status(target))
    except NetcacheError as exc:
        fail(exc)

    if not status.is_online:
        info("Offline: no probe endpoint answered.")
    elif not status.can_reach_target:
        info("Online, but the target service did not answer.")
    format_response(status.model_dump(mode="json"))
