"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for shiftauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.shiftauth/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir` and :func:`get_tokens_dir`.
* **Options file** -- a single JSON file (``config.json``) deserialised into
  :class:`~shiftauth.models.AuthOptions`.
* **Precedence resolution** -- :func:`resolve_options` merges CLI flags,
  environment variables and the options file into the effective options.

File writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written token behind.
"""

from __future__ import annotations

import contextlib
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from shiftauth.exceptions import ConfigError
from shiftauth.models import AuthOptions

_APP_NAME = "shiftauth"
_CONFIG_FILENAME = "config.json"

# Environment variables mapped onto AuthOptions fields.
_ENV_OPTIONS = {
    "SHIFTAUTH_SERVER": "server",
    "SHIFTAUTH_LOGIN": "login",
    "SHIFTAUTH_TOKEN": "token",
    "SHIFTAUTH_NOPROMPT": "noprompt",
    "SHIFTAUTH_USE_AUTHORIZATION_TOKENS": "use_authorization_tokens",
}
_TRUTHY = {"1", "true", "yes", "on"}


# --- Directories ---

# kind -> (XDG env var, default under $HOME, subdirectory of ~/.shiftauth)
_XDG_DIRS = {
    "config": ("XDG_CONFIG_HOME", (".config",), None),
    "data": ("XDG_DATA_HOME", (".local", "share"), "data"),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_default, fallback_sub = _XDG_DIRS[kind]
    if _is_xdg_platform():
        root = os.environ.get(env_var) or Path.home().joinpath(*home_default)
        path = Path(root) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback_sub:
            path = path / fallback_sub
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``; created on demand.

    ``$XDG_CONFIG_HOME/shiftauth`` on Linux/BSD, ``~/.shiftauth`` elsewhere.
    """
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory for tokens and crash logs; created on demand.

    ``$XDG_DATA_HOME/shiftauth`` on Linux/BSD, ``~/.shiftauth/data`` elsewhere.
    """
    return _app_dir("data")


def get_tokens_dir() -> Path:
    """Return the directory holding cached session tokens.

    The directory is *not* created here; :class:`~shiftauth.auth.TokenStore`
    creates it on first write and treats a missing directory as empty.
    """
    return get_data_dir() / "tokens"


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Replace *path* with *data* via a sibling temp file and ``os.replace``.

    Args:
        path: Destination file. Missing parent directories are created.
        data: Text content to write.
        mode: Permission bits set on the temp file before anything is
            written to it, e.g. ``0o600`` for tokens.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if mode is not None:
            os.chmod(tmp_name, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise

# --- Options file ---


def _options_path() -> Path:
    """Path to the options file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_options_file() -> dict[str, Any]:
    """Load the raw options dict from ``config.json``.

    Returns:
        The parsed JSON object, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = _options_path()
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def save_options(options: AuthOptions) -> None:
    """Persist options to ``config.json`` atomically.

    Secrets (``password`` and ``token``) are never written.
    """
    data = options.model_dump(mode="json", exclude={"password", "token"}, exclude_none=True)
    atomic_write(_options_path(), json.dumps(data, indent=2) + "\n", mode=0o600)


def _env_options() -> dict[str, Any]:
    """Collect option overrides from ``SHIFTAUTH_*`` environment variables."""
    values: dict[str, Any] = {}
    for var, field in _ENV_OPTIONS.items():
        raw = os.environ.get(var)
        if not raw:
            continue
        if field in ("noprompt", "use_authorization_tokens"):
            values[field] = raw.strip().lower() in _TRUTHY
        else:
            values[field] = raw
    return values


def resolve_options(**cli_overrides: Any) -> AuthOptions:
    """Resolve the effective options with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (keyword arguments whose value is not ``None``)
        2. Environment variables (``SHIFTAUTH_SERVER``, ``SHIFTAUTH_LOGIN``, ...)
        3. User config (``~/.config/shiftauth/config.json``)
        4. Defaults

    Returns:
        The merged :class:`~shiftauth.models.AuthOptions`.

    Raises:
        ConfigError: If the merged values fail validation.
    """
    merged = load_options_file()
    merged.update(_env_options())
    merged.update({k: v for k, v in cli_overrides.items() if v is not None})
    try:
        return AuthOptions.model_validate(merged)
    except ValueError as exc:
        raise ConfigError(f"Invalid options: {exc}") from exc
