"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for netcache:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.netcache/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~netcache.models.GlobalConfig`
  JSON file storing the target URL, probe and fetch timeouts, and the
  cache directory.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
* **Store location** -- :func:`get_store_dir` picks the directory that
  holds one JSON file per cache key.

All file writes, including cache entries written by
:class:`~netcache.store.LocalStore`, use an atomic temp-file-then-rename
strategy (:func:`atomic_write`) so a reader never sees a half-written file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from netcache.exceptions import ConfigError
from netcache.models import GlobalConfig

_APP_NAME = "netcache"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "netcache.json"
_STORE_SUBDIR = "entries"

ENV_TARGET_URL = "NETCACHE_TARGET_URL"
ENV_CACHE_DIR = "NETCACHE_CACHE_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/netcache/`` (default ``~/.config/netcache/``).
    On macOS/Windows: ``~/.netcache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (cache entries, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/netcache/`` (default ``~/.local/share/netcache/``).
    On macOS/Windows: ``~/.netcache/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_store_dir(config: GlobalConfig) -> Path:
    """Return the directory holding cache entry files.

    The directory itself is not created here; the store creates it on the
    first write.

    Args:
        config: The effective configuration. ``config.store.directory``
            wins when set; otherwise ``<data_dir>/entries`` is used.
    """
    if config.store.directory:
        return Path(config.store.directory).expanduser()
    return get_data_dir() / _STORE_SUBDIR


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    Its name starts with a dot so directory scans can tell it apart from
    finished files. On any failure the temp file is cleaned up and the
    original exception is re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~netcache.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        return GlobalConfig.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


def reset_global_config() -> GlobalConfig:
    """Overwrite the global configuration with defaults and return them."""
    config = GlobalConfig()
    save_global_config(config)
    return config


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./netcache.json``.

    Project-local config sits between global config and environment
    variables in the precedence chain. Its keys mirror
    :class:`~netcache.models.GlobalConfig` and are merged over the global
    values one section at a time.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overlay* into a copy of *base*."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_target_url: Optional[str] = None,
    cli_cache_dir: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_target_url``, ``cli_cache_dir``, ``cli_format``)
        2. Environment variables (``NETCACHE_TARGET_URL``, ``NETCACHE_CACHE_DIR``)
        3. Project config (``./netcache.json``)
        4. User config (``~/.config/netcache/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any config layer is malformed.
    """
    global_cfg = load_global_config()

    project = load_project_config()
    if project is not None:
        merged = _merge(global_cfg.model_dump(mode="json"), project)
        try:
            global_cfg = GlobalConfig.model_validate(merged)
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    env_target = os.environ.get(ENV_TARGET_URL)
    if env_target:
        global_cfg.target_url = env_target
    env_cache_dir = os.environ.get(ENV_CACHE_DIR)
    if env_cache_dir:
        global_cfg.store.directory = env_cache_dir

    if cli_target_url is not None:
        global_cfg.target_url = cli_target_url
    if cli_cache_dir is not None:
        global_cfg.store.directory = cli_cache_dir
    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg
