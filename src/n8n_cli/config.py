"""Environment-driven configuration and XDG paths.

n8n-cli keeps no configuration files of its own. Everything comes from the
environment:

* ``N8N_API_KEY`` -- the credential sent as ``X-N8N-API-KEY``. Required.
* ``N8N_BASE_URL`` -- the service URL, with or without the API base path.
  Required.
* ``N8N_CLI_COMMAND_TREE`` -- optional path to an alternative compiled
  command tree, used instead of the one packaged with n8n-cli.

:func:`load_runtime_config` reads the two required values into a
:class:`~n8n_cli.models.RuntimeConfig` that is then passed explicitly to the
request builder and executor. The data directory (crash logs) follows the
XDG Base Directory spec on Linux/BSD, see :func:`get_data_dir`.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Mapping, Optional

from n8n_cli.exceptions import ConfigError
from n8n_cli.models import RuntimeConfig

_APP_NAME = "n8n-cli"

ENV_API_KEY = "N8N_API_KEY"
ENV_BASE_URL = "N8N_BASE_URL"
ENV_COMMAND_TREE = "N8N_CLI_COMMAND_TREE"

DEFAULT_TIMEOUT = 30.0


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/n8n-cli/`` (default
    ``~/.local/share/n8n-cli/``). On macOS/Windows: ``~/.n8n-cli/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_logs_dir() -> Path:
    """Return ``<data_dir>/logs/``, creating it if necessary."""
    path = get_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Runtime configuration ---


def load_runtime_config(environ: Optional[Mapping[str, str]] = None) -> RuntimeConfig:
    """Read the credential and service URL from the environment.

    Args:
        environ: Mapping to read instead of :data:`os.environ`.

    Returns:
        The resolved :class:`~n8n_cli.models.RuntimeConfig`.

    Raises:
        ConfigError: If ``N8N_API_KEY`` or ``N8N_BASE_URL`` is unset or
            empty.
    """
    env = os.environ if environ is None else environ
    api_key = env.get(ENV_API_KEY, "")
    if not api_key:
        raise ConfigError(f"{ENV_API_KEY} missing")
    base_url = env.get(ENV_BASE_URL, "").strip()
    if not base_url:
        raise ConfigError(f"{ENV_BASE_URL} missing")
    return RuntimeConfig(api_key=api_key, base_url=base_url, timeout=DEFAULT_TIMEOUT)


def command_tree_path(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Return the tree file named by ``N8N_CLI_COMMAND_TREE``, or ``None`` for the packaged tree."""
    env = os.environ if environ is None else environ
    value = env.get(ENV_COMMAND_TREE, "")
    return Path(value).expanduser() if value else None
