"""Typer application and CLI entry point for netcache.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``status``, ``fetch``, ``cache``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~netcache.exceptions.NetcacheError` instances exit with their own
code; any other exception is written to a crash log under the data
directory.

See Also:
    :mod:`netcache.config`: Configuration resolution used by every command.
    :mod:`netcache.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from netcache import __version__
from netcache.commands.cache import cache_app
from netcache.commands.config import config_app
from netcache.commands.fetch import fetch_command
from netcache.commands.status import status_command
from netcache.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="netcache",
    help="Fetch JSON over the network with an offline cache fallback.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("status")(status_command)
app.command("fetch")(fetch_command)
app.add_typer(cache_app, name="cache", help="Inspect and manage cached entries.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"netcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    target: Optional[str] = typer.Option(
        None, "--target", help="Target service URL gating remote fetches."
    ),
    cache_dir: Optional[str] = typer.Option(
        None, "--cache-dir", help="Directory holding cached entries."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show probe and fallback decisions."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~netcache.output.OutputManager` from the
    output flags and stores the configuration overrides in ``ctx.obj`` for
    :func:`~netcache.commands.common.cache_from_context`.
    """
    from netcache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )

    ctx.ensure_object(dict)
    ctx.obj["target_url"] = target
    ctx.obj["cache_dir"] = cache_dir


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from netcache.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``netcache`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from netcache.exceptions import NetcacheError
        from netcache.output import error

        if isinstance(exc, NetcacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
