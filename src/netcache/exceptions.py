"""Exception hierarchy for netcache.

All exceptions inherit from :class:`NetcacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`netcache.exit_codes`.
The top-level error handler in :func:`netcache.app.main` catches
``NetcacheError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    NetcacheError                 (exit 1)
    +-- FetchError                (exit 6)
    |   +-- TransportError        (exit 6)
    |   +-- HttpStatusError       (exit 5)
    |   +-- ResponseDecodeError   (exit 7, also a DecodeError)
    +-- DecodeError               (exit 7)
    +-- StoreError                (exit 8)
    |   +-- StoreIOError          (exit 8)
    |   +-- CorruptEntryError     (exit 7, also a DecodeError)
    |   +-- PayloadError          (exit 8)
    |   +-- InvalidKeyError       (exit 2)
    +-- NoDataAvailableError      (exit 4)
    +-- ConnectivityRequiredError (exit 6)
    +-- ConfigError               (exit 1)
"""

from netcache.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_NO_DATA,
    EXIT_STORE_ERROR,
)


class NetcacheError(Exception):
    """Base exception for all netcache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`netcache.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# --- Remote fetch ---


class FetchError(NetcacheError):
    """Base class for failures of a single remote GET.

    The tolerant fetch path catches this type and falls back to the local
    cache; the forced-refresh path lets it propagate.
    """

    exit_code = EXIT_CONNECTION_ERROR


class TransportError(FetchError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class HttpStatusError(FetchError):
    """Raised when the remote service answers with a status outside 2xx.

    Args:
        message: Human-readable description, e.g. ``"HTTP 503 Service Unavailable"``.
        status_code: The HTTP status code that was received.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(NetcacheError):
    """Raised when a response body or a cache file is not valid JSON."""

    exit_code = EXIT_DECODE_ERROR


class ResponseDecodeError(FetchError, DecodeError):
    """Raised when a 2xx response body cannot be decoded as JSON."""

    exit_code = EXIT_DECODE_ERROR


# --- Local store ---


class StoreError(NetcacheError):
    """Base class for local cache store failures."""

    exit_code = EXIT_STORE_ERROR


class StoreIOError(StoreError):
    """Raised when the cache directory or an entry file cannot be created, read, or written."""

    exit_code = EXIT_STORE_ERROR


class CorruptEntryError(StoreError, DecodeError):
    """Raised when an entry file exists but is not a JSON object envelope."""

    exit_code = EXIT_DECODE_ERROR


class PayloadError(StoreError):
    """Raised when a value handed to the store cannot be serialised as JSON."""

    exit_code = EXIT_STORE_ERROR


class InvalidKeyError(StoreError):
    """Raised when a cache key cannot be used as a file name inside the store directory."""

    exit_code = EXIT_INVALID_USAGE


# --- Orchestration outcomes ---


class NoDataAvailableError(NetcacheError):
    """Raised when neither the remote source nor the local cache can provide data."""

    exit_code = EXIT_NO_DATA


class ConnectivityRequiredError(NetcacheError):
    """Raised when a forced refresh is attempted while the target is unreachable."""

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(NetcacheError):
    """Raised for configuration problems (invalid JSON, missing target URL)."""

    exit_code = EXIT_GENERIC_FAILURE
