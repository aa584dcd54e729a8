"""Configuration with XDG paths and precedence resolution.

swagger_reader keeps no state between invocations; the only configuration is
a handful of read-only process settings (fetch timeout, TLS verification,
version string) resolved once at startup into a frozen
:class:`~swagger_reader.models.ServerConfig`:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.swagger-reader/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **User config** -- an optional ``config.json`` deserialised into a
  :class:`~swagger_reader.models.GlobalConfig`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the user config file, and defaults.
* **Version lookup** -- :func:`get_version` reads the installed
  distribution's version once.
"""

from __future__ import annotations

import json
import os
import platform
from importlib import metadata
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from swagger_reader import __version__
from swagger_reader.exceptions import ConfigError
from swagger_reader.models import GlobalConfig, ServerConfig

_APP_NAME = "swagger-reader"
_DIST_NAME = "swagger-reader-mcp"
_CONFIG_FILENAME = "config.json"

ENV_TIMEOUT_MS = "SWAGGER_READER_TIMEOUT_MS"
ENV_VERIFY_SSL = "SWAGGER_READER_VERIFY_SSL"


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
    """Return the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/swagger-reader/`` (default
    ``~/.config/swagger-reader/``). On macOS/Windows: ``~/.swagger-reader/``.
    The directory is not created; a missing directory simply means no user
    config.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/swagger-reader/`` (default
    ``~/.local/share/swagger-reader/``). On macOS/Windows:
    ``~/.swagger-reader/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- User config ---


def load_global_config() -> GlobalConfig:
    """Load the user config file.

    Returns:
        The deserialised :class:`~swagger_reader.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc


# --- Version ---


def get_version() -> str:
    """Return the installed distribution version.

    Falls back to the package's ``__version__`` when running from a source
    tree that was never installed.
    """
    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return __version__


# --- Precedence resolution ---


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def resolve_config(
    cli_timeout_ms: Optional[int] = None,
    cli_verify_ssl: Optional[bool] = None,
) -> ServerConfig:
    """Resolve the process configuration with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_timeout_ms``, ``cli_verify_ssl``)
        2. Environment variables (``SWAGGER_READER_TIMEOUT_MS``,
           ``SWAGGER_READER_VERIFY_SSL``)
        3. User config (``~/.config/swagger-reader/config.json``)
        4. Defaults

    Returns:
        A frozen :class:`~swagger_reader.models.ServerConfig`.

    Raises:
        ConfigError: If any layer supplies an invalid value.
    """
    values: dict[str, Any] = {"version": get_version()}

    # 3. User config
    global_cfg = load_global_config()
    if global_cfg.timeout_ms is not None:
        values["timeout_ms"] = global_cfg.timeout_ms
    if global_cfg.verify_ssl is not None:
        values["verify_ssl"] = global_cfg.verify_ssl

    # 2. Environment variables
    env_timeout = os.environ.get(ENV_TIMEOUT_MS)
    if env_timeout:
        try:
            values["timeout_ms"] = int(env_timeout)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_TIMEOUT_MS} must be an integer, got {env_timeout!r}"
            ) from exc
    env_verify = os.environ.get(ENV_VERIFY_SSL)
    if env_verify:
        values["verify_ssl"] = _parse_bool(ENV_VERIFY_SSL, env_verify)

    # 1. CLI flags
    if cli_timeout_ms is not None:
        values["timeout_ms"] = cli_timeout_ms
    if cli_verify_ssl is not None:
        values["verify_ssl"] = cli_verify_ssl

    try:
        return ServerConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
