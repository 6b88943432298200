"""Cache commands -- inspect and manage stored entries.

Provides the ``netcache cache`` sub-command group:

* ``save KEY JSON`` -- store a value by hand, stamped with the current time.
* ``show KEY`` -- print a stored value.
* ``list`` -- every key with its capture time.
* ``clear [KEY]`` -- remove one entry or all of them.
"""

from __future__ import annotations

import json
from typing import Optional

import typer

from netcache.commands.common import cache_from_context, fail, format_timestamp
from netcache.exceptions import NetcacheError
from netcache.output import error, format_response, get_output, info, success


cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("save")
def cache_save(
    ctx: typer.Context,
    key: str = typer.Argument(help="Cache key."),
    value: str = typer.Argument(help="JSON value to store."),
) -> None:
    """Store a JSON value under KEY.

    Example::

        netcache cache save settings '{"theme": "dark"}'
    """
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        error(f"Value is not valid JSON: {exc}")
        raise typer.Exit(code=2) from None

    try:
        cache_from_context(ctx).save(key, data)
    except NetcacheError as exc:
        fail(exc)
    success(f"Saved '{key}'.")


@cache_app.command("show")
def cache_show(
    ctx: typer.Context,
    key: str = typer.Argument(help="Cache key."),
) -> None:
    """Print the value cached under KEY.

    Exits with code 4 when nothing is cached for KEY.
    """
    try:
        result = cache_from_context(ctx).load(key)
    except NetcacheError as exc:
        fail(exc)

    if result is None:
        error(f"No cached data for '{key}'")
        raise typer.Exit(code=4)
    info(f"cached at {format_timestamp(result.timestamp)}")
    format_response(result.data)


@cache_app.command("list")
def cache_list(ctx: typer.Context) -> None:
    """List cached keys with their capture times.

    Unreadable entries are left out of the listing.
    """
    try:
        cache = cache_from_context(ctx)
        entries = cache.maintenance.describe()
    except NetcacheError as exc:
        fail(exc)

    rows = [[key, format_timestamp(ts), str(ts)] for key, ts in entries]
    get_output().print_table(
        ["Key", "Captured (UTC)", "Timestamp"],
        rows,
        title=f"Cache -- {cache.store.directory} ({len(rows)})",
    )


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    key: Optional[str] = typer.Argument(None, help="Key to remove. Omit to clear everything."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Remove one cached entry, or every entry when KEY is omitted.

    Example::

        netcache cache clear habits
        netcache cache clear --yes
    """
    if key is None and not yes:
        if not typer.confirm("Remove every cached entry?"):
            info("Cancelled.")
            raise typer.Exit()

    try:
        removed = cache_from_context(ctx).clear(key)
    except NetcacheError as exc:
        fail(exc)

    if key is not None and not removed:
        info(f"Nothing cached for '{key}'.")
    else:
        success(f"Removed {len(removed)} cache entr{'y' if len(removed) == 1 else 'ies'}.")
