"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~netcache.exceptions.NetcacheError` subclass.
Shell wrappers can inspect the exit code to tell an offline machine apart
from an empty cache without parsing stderr.

Example::

    $ netcache fetch habits https://api.example.com/habits
    $ echo $?
    4   # EXIT_NO_DATA -- offline and nothing cached for "habits"
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (including an unusable cache key)."""

EXIT_NO_DATA = 4
"""Neither the remote source nor the local cache could provide data."""

EXIT_HTTP_ERROR = 5
"""The remote service answered with a non-2xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred, or connectivity was required but absent."""

EXIT_DECODE_ERROR = 7
"""A response body or cache file was not valid JSON."""

EXIT_STORE_ERROR = 8
"""The local cache directory could not be read or written."""
