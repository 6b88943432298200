"""Helpers shared by the netcache sub-commands."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import NoReturn, Optional

import typer

from netcache.exceptions import NetcacheError
from netcache.output import error
from netcache.service import NetCache


def cache_from_context(ctx: typer.Context) -> NetCache:
    """Build a :class:`NetCache` from the effective configuration.

    CLI overrides stored by the root callback (``--target``,
    ``--cache-dir``) take precedence over environment and config files.
    """
    from netcache.config import resolve_config

    obj = ctx.obj or {}
    config = resolve_config(
        cli_target_url=obj.get("target_url"),
        cli_cache_dir=obj.get("cache_dir"),
    )
    return NetCache.from_config(config)


def fail(exc: NetcacheError) -> NoReturn:
    """Report *exc* on stderr and exit with its exit code."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def format_timestamp(timestamp: int) -> str:
    """Render an epoch second as ISO-8601 UTC; ``0`` means the time is unknown."""
    if timestamp <= 0:
        return "unknown"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_headers(values: Optional[list[str]]) -> dict[str, str]:
    """Turn repeated ``-H "Name: value"`` options into a header mapping.

    Raises:
        typer.BadParameter: If an item has no colon or an empty name.
    """
    headers: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(
                f"Invalid header '{item}'. Expected 'Name: value'.",
                param_hint="--header",
            )
        headers[name.strip()] = value.strip()
    return headers
