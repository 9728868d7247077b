"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for spotapi:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.spotapi/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir` and :func:`get_data_dir`.
* **Client config** -- a single :class:`~spotapi.models.ClientConfig`
  JSON file storing the token source, transport and cache settings.
* **Precedence resolution** -- :func:`resolve_config` layers environment
  variables over the file on disk.
* **Credential resolution** -- :func:`resolve_credential` reads the bearer
  token from env vars, files or an interactive prompt.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from spotapi.exceptions import ConfigError, CredentialNotFoundError
from spotapi.models import ClientConfig

_APP_NAME = "spotapi"
_CONFIG_FILENAME = "config.json"

_TRUTHY = {"1", "true", "yes", "on"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/spotapi/`` (default ``~/.config/spotapi/``).
    On macOS/Windows: ``~/.spotapi/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the response cache. Its contents can be deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/spotapi/`` (default ``~/.cache/spotapi/``).
    On macOS/Windows: ``~/.spotapi/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/spotapi/`` (default ``~/.local/share/spotapi/``).
    On macOS/Windows: ``~/.spotapi/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception propagates.
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
        fd = None
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


# --- Client config ---


def config_path() -> Path:
    """Path to the client config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> ClientConfig:
    """Load the client configuration from the config directory.

    Returns:
        The deserialised :class:`~spotapi.models.ClientConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = config_path()
    if not path.is_file():
        return ClientConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ClientConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ClientConfig) -> None:
    """Persist the client configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(cli_format: Optional[str] = None) -> ClientConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_format``)
        2. Environment variables (``SPOTAPI_TOKEN_SOURCE``,
           ``SPOTAPI_TIMEOUT``, ``SPOTAPI_ALLOW_INSECURE_TLS``,
           ``SPOTAPI_CACHE_DIR``)
        3. User config (``~/.config/spotapi/config.json``)
        4. Defaults

    Raises:
        ConfigError: If the config file is invalid or an environment
            override cannot be parsed.
    """
    config = load_config()

    token_source = os.environ.get("SPOTAPI_TOKEN_SOURCE")
    if token_source:
        config.token_source = token_source

    timeout = os.environ.get("SPOTAPI_TIMEOUT")
    if timeout:
        try:
            config.request.timeout = float(timeout)
        except ValueError as exc:
            raise ConfigError(f"SPOTAPI_TIMEOUT must be a number, got '{timeout}'") from exc

    insecure = os.environ.get("SPOTAPI_ALLOW_INSECURE_TLS")
    if insecure is not None:
        config.request.allow_insecure_tls = insecure.strip().lower() in _TRUTHY

    cache_dir = os.environ.get("SPOTAPI_CACHE_DIR")
    if cache_dir:
        config.cache.directory = cache_dir

    if cli_format is not None:
        config.output.format = cli_format

    return config


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise CredentialNotFoundError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise CredentialNotFoundError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter bearer token: ")

    raise ConfigError(f"Unknown credential source format: {source}")
