"""User config discovery and loading, plus the XDG data directory.

The user config is a Python file, ``hardhat.config.py``, exporting a
``config`` attribute: a :class:`~hardhat_core.models.UserConfig` or a dict
validated into one.

Config path precedence (high to low):
    1. The ``--config`` CLI option.
    2. The ``HARDHAT_CONFIG`` environment variable.
    3. The nearest ``hardhat.config.py`` in the working directory or one of
       its parents.
"""

from __future__ import annotations

import importlib.util
import os
import platform
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from hardhat_core.exceptions import ConfigError
from hardhat_core.models import UserConfig

_APP_NAME = "hardhat-core"
CONFIG_FILENAME = "hardhat.config.py"
CONFIG_ENV_VAR = "HARDHAT_CONFIG"


# --- Config file ---


def find_config_path(start: Optional[Path] = None) -> Optional[Path]:
    """Return the nearest ``hardhat.config.py`` at or above *start* (default: cwd)."""
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config_path(cli_config: Optional[str] = None) -> Path:
    """Resolve the config file path through the precedence chain.

    Raises:
        ConfigError: If an explicit path does not exist, or no config file
            can be found.
    """
    explicit = cli_config or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path.resolve()

    found = find_config_path()
    if found is None:
        raise ConfigError(
            f"No {CONFIG_FILENAME} found in {Path.cwd()} or any parent directory."
        )
    return found


def load_user_config(path: Path) -> UserConfig:
    """Import the config file at *path* and validate its ``config`` attribute.

    The config's directory is put on ``sys.path`` so that the file, and any
    ``"module:attribute"`` reference it contains, can import sibling
    modules.

    Raises:
        ConfigError: If the file fails to import, has no ``config``
            attribute, or the value is not a valid config.
    """
    path = Path(path)
    config_dir = str(path.parent.resolve())
    if config_dir not in sys.path:
        sys.path.insert(0, config_dir)

    spec = importlib.util.spec_from_file_location("_hardhat_user_config", path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Cannot import config file {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ConfigError(f"Error while importing {path}: {exc}") from exc

    if not hasattr(module, "config"):
        raise ConfigError(f"Config file {path} does not define a 'config' attribute")

    value = module.config
    if isinstance(value, UserConfig):
        return value
    try:
        return UserConfig.model_validate(value)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}: {exc}") from exc


# --- XDG data directory ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/hardhat-core/`` (default
    ``~/.local/share/hardhat-core/``). Elsewhere: ``~/.hardhat-core/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path
