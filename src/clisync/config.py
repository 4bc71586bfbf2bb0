"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for clisync:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.clisync/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **User config** -- an optional ``config.json`` in the config directory
  holding defaults shared by every project.
* **Project config** -- an optional ``./clisync.json`` pinning the SDK
  location, output directory and manifest path of one repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project config, and user config into the final
  :class:`~clisync.models.GeneratorConfig`.
* **SDK location** -- :func:`resolve_sdk_path` turns the configured path
  (or the vendored default) into a directory that is known to exist.

Every file clisync writes -- manifest, bindings, command catalog -- goes
through :func:`atomic_write` so an interrupted run never leaves a truncated
file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from clisync.exceptions import ConfigError, SourceLocationError
from clisync.models import GeneratorConfig

_APP_NAME = "clisync"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "clisync.json"

DEFAULT_SDK_PATH = os.path.join("vendor", "github.com", "Scalingo", "go-scalingo", "v8")
"""Vendored SDK location used when no path is configured anywhere."""

_ENV_OVERRIDES = {
    "CLISYNC_SDK_PATH": "sdk_path",
    "CLISYNC_OUTPUT": "output_dir",
    "CLISYNC_MANIFEST": "manifest_path",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/clisync/`` (default ``~/.config/clisync/``).
    On macOS/Windows: ``~/.clisync/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/clisync/`` (default ``~/.local/share/clisync/``).
    On macOS/Windows: ``~/.clisync/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. If anything fails
    before the rename, the temp file is removed and *path* keeps its
    previous content.

    Raises:
        OSError: If the directory cannot be created or the data cannot be
            written. Callers translate this into their own error type.
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
        tmp_path = None
    finally:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass


# --- Config files ---


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_user_config() -> Optional[dict[str, Any]]:
    """Load the user-wide config from the XDG config directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    return _read_json_object(get_config_dir() / _CONFIG_FILENAME, "user config")


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./clisync.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    return _read_json_object(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


def _merge(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Overlay *layer* onto *base*; the ``conventions`` table merges key by key."""
    merged = dict(base)
    for key, value in layer.items():
        if key == "conventions" and isinstance(value, dict):
            merged[key] = {**merged.get(key, {}), **value}
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_sdk_path: Optional[str] = None,
    cli_output: Optional[str] = None,
    cli_manifest: Optional[str] = None,
) -> GeneratorConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--sdk-path``, ``--output``, ``--manifest``)
        2. Environment variables (``CLISYNC_SDK_PATH``, ``CLISYNC_OUTPUT``,
           ``CLISYNC_MANIFEST``)
        3. Project config (``./clisync.json``)
        4. User config (``~/.config/clisync/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is invalid or the merged values fail
            validation.
    """
    merged: dict[str, Any] = {}

    for layer in (load_user_config(), load_project_config()):
        if layer is not None:
            merged = _merge(merged, layer)

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            merged[key] = value

    cli_values = {
        "sdk_path": cli_sdk_path,
        "output_dir": cli_output,
        "manifest_path": cli_manifest,
    }
    for key, value in cli_values.items():
        if value is not None:
            merged[key] = value

    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def resolve_sdk_path(configured: Optional[str]) -> Path:
    """Return the SDK directory to scan.

    An explicitly configured path must exist. Without one, the vendored
    default (:data:`DEFAULT_SDK_PATH`) is used when present.

    Raises:
        SourceLocationError: If the path does not exist, is not a
            directory, or cannot be accessed.
    """
    if configured:
        path = Path(configured)
        try:
            if not path.exists():
                raise SourceLocationError(f"sdk path {configured} does not exist")
            if not path.is_dir():
                raise SourceLocationError(f"sdk path {configured} is not a directory")
        except OSError as exc:
            raise SourceLocationError(f"failed to read sdk path {configured}: {exc}") from exc
        return path

    default = Path(DEFAULT_SDK_PATH)
    if default.is_dir():
        return default
    raise SourceLocationError(
        f"vendored sdk not found at {DEFAULT_SDK_PATH}; provide --sdk-path"
    )
