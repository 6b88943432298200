"""Built-in CLI sub-commands for netcache.

This package groups the Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~netcache.commands.status` -- report internet and target reachability.
* :mod:`~netcache.commands.fetch` -- fetch a key with cache fallback or a
  forced refresh.
* :mod:`~netcache.commands.cache` -- save, show, list, and clear cache entries.
* :mod:`~netcache.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``cache`` and ``config``) or a plain callback
function registered directly on the root app (for single commands like
``status`` and ``fetch``).
"""
