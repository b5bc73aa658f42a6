"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for riotauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.riotauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~riotauth.models.GlobalConfig`
  JSON file holding provider endpoints, timeouts, and output defaults.
* **Store location** -- :func:`resolve_store_path` picks the credential
  store file from the CLI flag, ``RIOTAUTH_STORE``, the config file, or the
  default under the data directory.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from riotauth.exceptions import ConfigError
from riotauth.models import GlobalConfig

_APP_NAME = "riotauth"
_CONFIG_FILENAME = "config.json"
_STORE_FILENAME = "session.json"

CONFIG_ENV_VAR = "RIOTAUTH_CONFIG"
STORE_ENV_VAR = "RIOTAUTH_STORE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses the XDG Base Directory layout (Linux/FreeBSD)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/riotauth/`` (default ``~/.config/riotauth/``).
    On macOS/Windows: ``~/.riotauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (session store, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/riotauth/`` (default ``~/.local/share/riotauth/``).
    On macOS/Windows: ``~/.riotauth/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  When *mode* is
    given the permissions are applied before any content is written.
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
        if mode is not None:
            os.chmod(tmp_path, mode)
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


# --- Global config ---


def config_path() -> Path:
    """Path to the global config file, honouring ``RIOTAUTH_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~riotauth.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


# --- Store location ---


def resolve_store_path(
    cli_store: Optional[str] = None,
    config: Optional[GlobalConfig] = None,
) -> Path:
    """Resolve the credential store file.

    Precedence (high to low):
        1. ``cli_store`` (the ``--store`` flag)
        2. ``RIOTAUTH_STORE`` environment variable
        3. ``store_path`` in the global config
        4. ``<data_dir>/session.json``
    """
    if cli_store:
        return Path(cli_store).expanduser()
    env_store = os.environ.get(STORE_ENV_VAR)
    if env_store:
        return Path(env_store).expanduser()
    if config is not None and config.store_path:
        return Path(config.store_path).expanduser()
    return get_data_dir() / _STORE_FILENAME
